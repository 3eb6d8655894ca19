# Routes package init
"""
Roadie User Service — API Routes Package
=========================================

Route Inventory:
    - users.py:   ANY /users, ANY /users/{user_id}  (handed to UserDispatcher)
    - health.py:  GET /health                        (store reachability)

Routes stay thin: they turn a Starlette request into an ApiRequest, pick the
store for this request, and copy the dispatcher's answer onto the wire.
"""
