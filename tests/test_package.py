import pytest

import scratchnet
from scratchnet.models import TrainingReport


def test_lazy_public_api():
    from scratchnet.matrix import Matrix
    from scratchnet.network import Network

    assert scratchnet.Matrix is Matrix
    assert scratchnet.Network is Network
    for name in scratchnet.__all__:
        assert getattr(scratchnet, name) is not None


def test_unknown_attribute():
    with pytest.raises(AttributeError):
        scratchnet.does_not_exist  # noqa: B018


def test_report_serialises_cost_history():
    report = TrainingReport(
        structure=[2, 1],
        learning_rate=0.01,
        update_rule="standard",
        sampling="fixed",
        iterations=1,
        start_time=1000.0,
    )
    report.record(0, 0, 0.5)
    data = report.model_dump()
    assert data["cost_history"] == [{"iteration": 0, "sample_index": 0, "cost": 0.5}]
    assert data["accuracy"] is None
