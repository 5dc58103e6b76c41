from schoolledger.shared.database.base_model import Base
from schoolledger.shared.database.session import DatabaseSessionFactory

__all__ = ["Base", "DatabaseSessionFactory"]
