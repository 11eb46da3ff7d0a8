"""
The `database` package is responsible for all interactions with the application's database.
It provides configuration, entity definitions, data access and the service layer
that the API and the WebSocket handler call into.

Contents:
    - config:
        Settings (env / .env) and the SQLAlchemy engine, metadata and session factory.

    - entities:
        SQLAlchemy entity models: users, lawyers, sessions, appointments,
        wallet transactions, chat rooms and chat messages.

    - daos:
        Data Access Objects (DAOs) providing the queries and atomic updates for the entities.

    - core:
        Transactional service functions (auth, lawyers, appointments, wallet, chat)
        and the chat access gate.

    - helpers:
        The `@transactional` decorator and UTC time helpers.
"""
