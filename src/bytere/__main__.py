from bytere.cli import main

raise SystemExit(main())
