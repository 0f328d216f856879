from everything_mcp.cli import main

raise SystemExit(main())
