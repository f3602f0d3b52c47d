from pod_ttl_restarter.main import main

raise SystemExit(main())
