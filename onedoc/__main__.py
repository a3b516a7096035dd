from onedoc.cli import main

raise SystemExit(main())
