class PruneWalkError(Exception):
    # base exception for all application-specific errors.
    pass

class ConfigError(PruneWalkError):
    # errors related to configuration files, profiles and pattern files.
    pass

class DiscoveryError(PruneWalkError):
    # errors during file discovery.
    pass

class PatternError(DiscoveryError):
    # a glob pattern could not be compiled. raised before any traversal i/o.
    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"invalid glob pattern {pattern!r}: {reason}")
