# Services package init
"""
Roadie User Service — Services Layer
=====================================

What:  The dispatcher and the persistence abstraction it talks to.

Service Inventory:
    - UserStore (abstract): find / insert / replace / remove contract
    - SqlAlchemyUserStore: store over one async SQLAlchemy session
    - InMemoryUserStore: dict-backed store for tests and local runs
    - UserDispatcher: method → operation → response

Routes and the Lambda handler build a store per request and hand it to a new
UserDispatcher; nothing in this package holds a connection of its own.
"""
