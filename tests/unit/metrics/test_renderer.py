"""Tests for rendering the aggregation store into gauge samples."""

from __future__ import annotations

from kube_job_exporter.jobs import AggregationStore
from kube_job_exporter.metrics import DESCRIPTORS, LABEL_NAMES, MetricType, render
from tests.factories.jobs import make_job


def test_descriptors_use_canonical_names() -> None:
    assert [d.name for d in DESCRIPTORS] == [
        "kube_job_status",
        "kube_job_start_time",
        "kube_job_completion_time",
    ]
    assert all(d.label_names == LABEL_NAMES == ("namespace", "name") for d in DESCRIPTORS)
    assert all(d.metric_type is MetricType.GAUGE for d in DESCRIPTORS)


def test_empty_store_renders_nothing(store: AggregationStore) -> None:
    assert render(store) == []


def test_each_record_yields_three_labelled_samples(store: AggregationStore) -> None:
    store.refresh([make_job(owner="job1", namespace="a", failed=1, start=10, completion=100)])

    samples = render(store)

    assert [(s.name, s.value) for s in samples] == [
        ("kube_job_status", 1.0),
        ("kube_job_start_time", 10.0),
        ("kube_job_completion_time", 100.0),
    ]
    assert all(s.labels == {"namespace": "a", "name": "job1"} for s in samples)
    assert all(isinstance(s.value, float) for s in samples)


def test_running_status_is_encoded_as_two(store: AggregationStore) -> None:
    # Completed job objects can still report active pods while they are cleaned up.
    store.refresh([make_job(active=1, completion=100)])

    assert render(store)[0].value == 2.0


def test_render_is_pure(store: AggregationStore) -> None:
    store.refresh([make_job(owner="b", namespace="z"), make_job(owner="a", namespace="y", failed=1)])
    before = store.records()

    first = render(store)
    second = render(store)

    assert first == second
    assert store.records() == before


def test_render_orders_by_namespace_then_name(store: AggregationStore) -> None:
    store.refresh([make_job(owner="b", namespace="x"), make_job(owner="a", namespace="y"), make_job(owner="a", namespace="x")])

    statuses = [s for s in render(store) if s.name == "kube_job_status"]

    assert [(s.labels["namespace"], s.labels["name"]) for s in statuses] == [("x", "a"), ("x", "b"), ("y", "a")]


def test_sample_labels_are_independent(store: AggregationStore) -> None:
    store.refresh([make_job()])
    samples = render(store)

    samples[0].labels["name"] = "changed"

    assert samples[1].labels["name"] == "job1"
