"""Session statistics across evaluation cycles."""

from .cycle import CycleResult
from .models import Stats


class StatsAccumulator:
    """Monotonic counters for the life of the process"""

    def __init__(self):
        self.routes_checked = 0
        self.opportunities_found = 0
        self.total_profit = 0.0
        self.max_profit = 0.0
        self.cycles = 0

    def record(self, result: CycleResult):
        self.cycles += 1
        self.routes_checked += result.routes_checked
        for opportunity in result.opportunities:
            self.opportunities_found += 1
            self.total_profit += opportunity.profit
            if opportunity.profit > self.max_profit:
                self.max_profit = opportunity.profit

    def snapshot(self) -> Stats:
        return Stats(
            routes_checked=self.routes_checked,
            opportunities_found=self.opportunities_found,
            total_profit=self.total_profit,
            max_profit=self.max_profit,
        )

    def summary(self) -> str:
        return (
            f"Session stats | routes checked: {self.routes_checked} | "
            f"opportunities: {self.opportunities_found} | "
            f"potential profit: {self.total_profit:.2f} USD | "
            f"best: {self.max_profit:.2f} USD"
        )
