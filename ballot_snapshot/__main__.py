from ballot_snapshot.cli import main

raise SystemExit(main())
