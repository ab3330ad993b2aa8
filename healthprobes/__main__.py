from healthprobes.main import main

raise SystemExit(main())
