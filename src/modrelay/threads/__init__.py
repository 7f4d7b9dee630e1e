"""
Thread state and message relay.

- **duration_parser.py**: bare minutes or ``pytimeparse`` expressions to milliseconds
- **thread_resolver.py**: staff channel to open thread
- **block_store.py**: block upsert, read-time expiry, unblock, block DMs
- **relay_engine.py**: relay preconditions, payload composition and delivery
- **errors.py**: expected failures and their localization keys
"""
