"""
OpenTelemetry metric instruments for the order simulator.

We track:
- Orders created, by terminal status
- Failed synthesis runs, by stage
- Customer accounts created
- Synthesis run latency
"""

from typing import NamedTuple

from opentelemetry.metrics import Counter, Histogram

from libs.observability.metrics import get_meter


class SimulatorInstruments(NamedTuple):
    orders_created: Counter
    run_failures: Counter
    customers_created: Counter
    run_latency: Histogram


def get_simulator_instruments() -> SimulatorInstruments:
    """
    Create OpenTelemetry instruments for the synthesizer.
    """
    meter = get_meter("ordersim.synthesizer")

    return SimulatorInstruments(
        orders_created=meter.create_counter(
            name="ordersim_orders_created",
            description="Count of synthesized orders, by status",
            unit="1",
        ),
        run_failures=meter.create_counter(
            name="ordersim_runs_failed",
            description="Count of synthesis runs aborted, by stage",
            unit="1",
        ),
        customers_created=meter.create_counter(
            name="ordersim_customers_created",
            description="Count of customer accounts materialized from the identity pool",
            unit="1",
        ),
        run_latency=meter.create_histogram(
            name="ordersim_run_latency_ms",
            description="Latency of one synthesis run in milliseconds",
            unit="ms",
        ),
    )
