from mandb.cli import main

raise SystemExit(main())
