from prefetch.cli import main

raise SystemExit(main())
