from envguard.cli import main

raise SystemExit(main())
