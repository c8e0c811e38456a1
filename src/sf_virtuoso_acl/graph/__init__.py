from sf_virtuoso_acl.graph.named_graph import NO_DEFAULT, NamedGraphManager
from sf_virtuoso_acl.graph.view import GraphView

__all__ = ["NO_DEFAULT", "NamedGraphManager", "GraphView"]
