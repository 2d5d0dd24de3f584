from sqlalchemy import Engine

from database.repositories import (
    AgentRepository,
    DeploymentRepository,
    PositionRepository,
    SignalRepository,
    UserAddressRepository,
    ActivityRepository,
)


class Ledger:
    """
    The read-only query surface the analytics endpoints run against.

    Holds one repository per entity, all sharing the engine handed in by the
    application. Nothing here owns the engine's lifecycle.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self.agents = AgentRepository(engine)
        self.deployments = DeploymentRepository(engine)
        self.positions = PositionRepository(engine)
        self.signals = SignalRepository(engine)
        self.user_addresses = UserAddressRepository(engine)
        self.activity = ActivityRepository(engine)
