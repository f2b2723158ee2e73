from .meta_store import CommitMeta, CommitMetaStore

__all__ = ["CommitMeta", "CommitMetaStore"]
