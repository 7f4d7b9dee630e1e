"""
modrelay - thread relay and block engine for a Discord support bot

Core Components:

- **Threads**: open-thread lookup for staff channels, time-boxed user blocks
  with read-time expiry, and the staff-to-user message relay
- **Commands**: ``/block``, ``/unblock`` and the "Reply" / "Reply anonymously"
  message commands
- **Persistence**: a single aiosqlite connection with per-table repositories
- **Localization**: YAML string catalogs keyed by dotted names

Usage:
    from modrelay.main import main
    main()
"""
