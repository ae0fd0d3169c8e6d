"""
Services module for external integrations.

Key components:
- openai_client: async wrapper for the ephemeral realtime session and Responses
  API endpoints, raising TransportError on any upstream failure.
- websocket_client: SessionClient, the client side of the session socket used by
  relays and scripted test clients.

Usage examples:
```python
from app.services.websocket_client import SessionClient, build_session_url

client = SessionClient(build_session_url("ws://localhost:8000/ws", "simpleHandoff"))
if await client.connect():
    await client.send_user_text("I need 2x4 lumber")
    await client.close()
```
"""
