from cull.cli import main

raise SystemExit(main())
