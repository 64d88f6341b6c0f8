"""
Agents used by the Thansin Chat runtime.

TurnDispatcher:

- receives the new user message
- appends it to the session history
- asks the generation backend for the companion's reply
- appends the reply, or a classified error turn
"""
