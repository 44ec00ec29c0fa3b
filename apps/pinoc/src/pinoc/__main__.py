from pinoc.cli import main

raise SystemExit(main())
