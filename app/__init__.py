"""
Realtime Agents - orchestration server for multi-agent realtime voice sessions

The browser holds the realtime media connection and relays the events it receives
over a session socket. This application owns everything above the media layer:
the transcript and event log, tool execution, agent-to-agent handoffs, supervisor
escalation and output moderation.

Key Components:
- agents: tools, the validated agent graph, supervisor escalation and guardrails
- config: Application-wide configuration, constants, and logging setup
- handlers: reconciliation of relayed realtime events into a session's transcript
- models: transcript, event log and wire schemas
- scenarios: the selectable agent sets
- services: upstream HTTP client and the session socket client
- session: per-connection orchestration (RealtimeSession)
- websocket_manager: session socket lifecycle and message routing

Getting Started:
1. Set OPENAI_API_KEY (and optionally PORT, HOST, LOG_LEVEL) in the environment
   or a .env file.
2. Start the server:
   ```bash
   python run.py
   ```
3. Point the browser relay at ws://your-server:8000/ws?agentConfig=chatSupervisor
"""
