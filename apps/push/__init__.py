"""
Admin alert delivery.

Delivers notifications to administrators over one of two mutually exclusive
channels per event:
- push: a browser push endpoint registered with the backend (needs a VAPID key)
- local: permission-only alerts shown by the client (fallback)

Browser permission always overrides what the backend has stored.
"""
