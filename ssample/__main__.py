from ssample.cli import main

raise SystemExit(main())
