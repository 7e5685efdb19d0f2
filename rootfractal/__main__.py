from rootfractal.cli import main

raise SystemExit(main())
