from daytracker.server import main

raise SystemExit(main())
