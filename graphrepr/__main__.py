from graphrepr.cli import main

raise SystemExit(main())
