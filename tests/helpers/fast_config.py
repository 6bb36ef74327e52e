from devenvd import Config


class FastConfig(Config):
    def __init__(self):
        super().__init__()
        self.runtime_binary = None
        self.health_convergence_timeout = 0.3
        self.health_convergence_interval = 0.05
        self.metrics_interval = 0.05
        self.operations_retention = 100


def make_config(**overrides) -> type[Config]:
    class OverriddenConfig(FastConfig):
        def __init__(self):
            super().__init__()
            for key, value in overrides.items():
                setattr(self, key, value)

    return OverriddenConfig
