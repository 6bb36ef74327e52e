import vedro

from devenvd.core.units import parse_size
from devenvd.core.units import parse_size_pair


class Scenario(vedro.Scenario):
    subject = 'parse size {raw}'

    @vedro.params('0B', 0)
    @vedro.params('512', 512)
    @vedro.params('20kB', 20_000)
    @vedro.params('1.5MB', 1_500_000)
    @vedro.params('3GB', 3_000_000_000)
    @vedro.params('1KiB', 1024)
    @vedro.params('1.5GiB', 1_610_612_736)
    @vedro.params(' 2 MiB ', 2 * 1024 ** 2)
    def __init__(self, raw, expected):
        self.raw = raw
        self.expected = expected

    async def when_size_is_parsed(self):
        self.size = parse_size(self.raw)

    async def then_decimal_and_binary_units_should_differ(self):
        assert self.size == self.expected

    async def and_it_should_work_inside_pairs(self):
        assert parse_size_pair(f'{self.raw} / 1kB') == (self.expected, 1000)
