class StatsParseError(ValueError):
    def __init__(self, field: str, raw: str):
        self.field = field
        self.raw = raw
        super().__init__(f"Can't parse {field} from {raw!r}")
