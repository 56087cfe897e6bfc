"""
End-to-end tests for hopkins().

Covers the statistic on uniform and clustered data, reproducibility,
the statistics channel, the result hierarchy and error ordering.
"""

import numpy as np
import pytest

from pytendency.core.capabilities import CAPABILITY_BATCH_QUERY
from pytendency.core.exceptions import (
    IncompleteOverrideError,
    OracleFailureError,
    SampleSizeExceedsDataError,
    ValidationError,
)
from pytendency.core.hierarchy import EvaluationPipeline, ResultHierarchy
from pytendency.core.statistics import StatisticsChannelWarning, StatisticsCollector
from pytendency.hopkins import HopkinsDesign, HopkinsSolution, hopkins
from pytendency.hopkins.solution import STATISTICS_PREFIX
from pytendency.neighbors import BruteForceOracle, KDTreeOracle


class RecordingOracle:
    """Per-point oracle that counts queries."""

    def __init__(self, data):
        self._inner = KDTreeOracle(data)
        self.calls = 0

    def knn_distance(self, point, rank):
        self.calls += 1
        return self._inner.knn_distance(point, rank)


def run(data, sample_size=None, **kwargs):
    kwargs.setdefault('emit_statistics', False)
    return hopkins(data, sample_size, **kwargs)


# ═══════════════════════════════════════════════════════════════════════
# Statistic
# ═══════════════════════════════════════════════════════════════════════


class TestStatistic:

    def test_uniform_data_not_significant(self, uniform_data):
        result = run(uniform_data, 50, repetitions=5, seed=1)
        assert 0.3 < result.statistic < 0.7
        assert result.p_value > 0.001

    def test_clustered_data_significant(self, clustered_data):
        """Real points sit much closer to each other than random locations."""
        result = run(clustered_data, 50, repetitions=5, seed=1)
        assert result.statistic > 0.9
        assert result.p_value < 1e-6

    @pytest.mark.parametrize("seed", range(5))
    def test_small_cluster_in_uniform_background(self, rng, seed):
        """
        950 uniform points plus a 50-point cluster stay near 0.5.

        Only about S/20 sampled real points fall in the cluster, so the
        mean statistic cannot separate from Beta(S, S) noise.
        """
        background = rng.random((950, 2))
        cluster = np.array([0.3, 0.7]) + rng.normal(scale=0.01, size=(50, 2))
        data = np.vstack([background, cluster])
        result = run(data, 50, repetitions=5, seed=seed)
        assert 0.35 < result.statistic < 0.65
        assert result.p_value > 0.01

    def test_h_in_unit_interval(self, rng):
        data = rng.standard_normal((200, 4))
        result = run(data, 20, repetitions=10, seed=3)
        assert np.all((result.h >= 0.0) & (result.h <= 1.0))
        assert 0.0 <= result.p_value <= 0.5

    def test_identical_points(self):
        result = run(np.full((10, 2), 3.0), 3, repetitions=2, seed=0)
        assert result.statistic == 0.5
        assert result.u_mean == 0.0
        assert result.w_mean == 0.0
        assert result.p_value == pytest.approx(0.5, abs=1e-12)

    def test_one_dimensional_input(self, rng):
        result = run(rng.random(100), 10, seed=0)
        assert result.dim == 1

    def test_dataframe_input(self, uniform_data):
        pd = pytest.importorskip("pandas")
        df = pd.DataFrame(uniform_data, columns=['x', 'y'])
        from_df = run(df, 30, seed=2)
        from_array = run(uniform_data, 30, seed=2)
        assert from_df.statistic == from_array.statistic

    def test_default_sample_size(self, uniform_data):
        assert run(uniform_data, seed=0).sample_size == 100

    def test_h_mean_matches_trials(self, uniform_data):
        result = run(uniform_data, 40, repetitions=6, seed=4)
        np.testing.assert_allclose(result.h_mean, result.h.mean(), rtol=1e-12)
        np.testing.assert_allclose(result.h_var, np.var(result.h, ddof=1), rtol=1e-10)
        np.testing.assert_allclose(result.u_std, np.std(result.u, ddof=1), rtol=1e-10)

    def test_higher_k(self, uniform_data):
        result = run(uniform_data, 40, repetitions=3, k=3, seed=4)
        assert result.k == 3
        assert 0.0 < result.statistic < 1.0

    def test_sampling_box_override(self, uniform_data):
        result = run(uniform_data, 40, seed=4, minima=[0.0], maxima=[10.0])
        assert result.bounding_box.source == "override"
        np.testing.assert_array_equal(result.bounding_box.extend, [10.0, 10.0])
        # Most of the box is far from the data
        assert result.statistic > 0.9


# ═══════════════════════════════════════════════════════════════════════
# Reproducibility
# ═══════════════════════════════════════════════════════════════════════


class TestReproducibility:

    def test_same_seed_same_result(self, uniform_data):
        a = run(uniform_data, 30, repetitions=4, seed=99)
        b = run(uniform_data, 30, repetitions=4, seed=99)
        np.testing.assert_array_equal(a.h, b.h)
        assert a.statistic == b.statistic
        assert a.p_value == b.p_value

    def test_different_seeds_differ(self, uniform_data):
        a = run(uniform_data, 30, seed=1)
        b = run(uniform_data, 30, seed=2)
        assert a.statistic != b.statistic

    def test_threads_do_not_change_trials(self, uniform_data):
        seq = run(uniform_data, 30, repetitions=8, seed=7, n_jobs=1)
        par = run(uniform_data, 30, repetitions=8, seed=7, n_jobs=4)
        np.testing.assert_array_equal(seq.h, par.h)
        assert par.info['n_jobs'] == 4
        assert par.statistic == pytest.approx(seq.statistic, rel=1e-12)

    def test_unseeded_records_entropy(self, uniform_data):
        result = run(uniform_data, 30, repetitions=3)
        entropy = result.info['seed_entropy']
        replay = run(uniform_data, 30, repetitions=3, seed=entropy)
        np.testing.assert_array_equal(result.h, replay.h)

    def test_batch_and_pointwise_oracles_agree(self, uniform_data):
        batched = run(uniform_data, 30, repetitions=3, seed=5, oracle=KDTreeOracle(uniform_data))
        pointwise = run(uniform_data, 30, repetitions=3, seed=5, oracle=RecordingOracle(uniform_data))
        np.testing.assert_array_equal(batched.u, pointwise.u)
        np.testing.assert_array_equal(batched.w, pointwise.w)

    def test_brute_force_agrees_with_kdtree(self, uniform_data):
        kd = run(uniform_data, 30, repetitions=3, seed=5)
        brute = run(uniform_data, 30, repetitions=3, seed=5, oracle=BruteForceOracle(uniform_data))
        np.testing.assert_allclose(brute.h, kd.h, rtol=1e-10)
        assert kd.info['oracle'] == 'kdtree'
        assert brute.info['oracle'] == 'brute_euclidean'


# ═══════════════════════════════════════════════════════════════════════
# Metrics and backends
# ═══════════════════════════════════════════════════════════════════════


class TestMetrics:

    def test_manhattan(self, uniform_data):
        result = run(uniform_data, 30, seed=1, metric='manhattan')
        assert result.info['oracle'] == 'kdtree'

    def test_metric_kwargs(self, uniform_data):
        result = run(uniform_data, 30, seed=1, metric='minkowski', metric_kwargs={'p': 3})
        assert result.info['oracle'] == 'kdtree'

    def test_cdist_only_metric(self, uniform_data):
        result = run(uniform_data, 30, seed=1, metric='sqeuclidean')
        assert result.info['oracle'] == 'brute_sqeuclidean'

    def test_unknown_backend(self, uniform_data):
        with pytest.raises(ValidationError, match="backend"):
            run(uniform_data, 30, backend='tpu')

    def test_gpu_backend_rejects_other_metrics(self, uniform_data):
        with pytest.raises(ValidationError, match="euclidean"):
            run(uniform_data, 30, backend='gpu', metric='cosine')

    def test_auto_backend_with_injected_oracle_uses_cpu(self, uniform_data):
        result = run(uniform_data, 30, seed=1, backend='auto', oracle=KDTreeOracle(uniform_data))
        assert result.backend_name == 'cpu_hopkins'

    def test_thread_unsafe_oracle_runs_sequentially(self, uniform_data):
        result = run(uniform_data, 20, repetitions=4, seed=1, n_jobs=4,
                     oracle=RecordingOracle(uniform_data))
        assert result.info['n_jobs'] == 1
        assert result._result.has_warning("not thread safe")


# ═══════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════


class TestErrors:

    def test_sample_size_checked_before_sampling(self):
        data = np.random.default_rng(0).random((10, 2))
        oracle = RecordingOracle(data)
        with pytest.raises(SampleSizeExceedsDataError):
            run(data, 11, oracle=oracle)
        assert oracle.calls == 0

    def test_incomplete_override_before_sampling(self, uniform_data):
        oracle = RecordingOracle(uniform_data)
        with pytest.raises(IncompleteOverrideError):
            run(uniform_data, 10, oracle=oracle, minima=[0.0, 0.0])
        assert oracle.calls == 0

    def test_k_too_large_for_data(self):
        with pytest.raises(OracleFailureError) as exc_info:
            run(np.random.default_rng(0).random((3, 2)), 1, k=3, seed=0)
        assert exc_info.value.rank == 4

    def test_oracle_failure_aborts(self, uniform_data):
        class Broken:
            def supports(self, capability):
                return capability == CAPABILITY_BATCH_QUERY

            def knn_distances(self, points, rank):
                raise MemoryError("index evicted")

        with pytest.raises(OracleFailureError):
            run(uniform_data, 10, seed=0, oracle=Broken())

    def test_prebuilt_design(self, uniform_data):
        design = HopkinsDesign.for_hopkins(uniform_data, 25, repetitions=2, seed=8)
        assert run(design).statistic == run(uniform_data, 25, repetitions=2, seed=8).statistic

    @pytest.mark.parametrize("kwargs", [
        {'sample_size': 10},
        {'repetitions': 3},
        {'k': 2},
        {'seed': 1},
        {'minima': [0.0, 0.0], 'maxima': [1.0, 1.0]},
        {'n_jobs': 2},
    ])
    def test_prebuilt_design_rejects_design_arguments(self, uniform_data, kwargs):
        design = HopkinsDesign.for_hopkins(uniform_data, 25, seed=8)
        with pytest.raises(ValidationError, match="HopkinsDesign"):
            run(design, **kwargs)


# ═══════════════════════════════════════════════════════════════════════
# Statistics channel
# ═══════════════════════════════════════════════════════════════════════


class TestStatisticsChannel:

    def test_records_with_repetitions(self, uniform_data):
        collector = StatisticsCollector()
        with collector.attached():
            result = hopkins(uniform_data, 50, repetitions=5, seed=1)
        names = [name for name, _ in collector.records]
        p = STATISTICS_PREFIX
        assert names == [
            f"{p}.samplesize",
            f"{p}.dim",
            f"{p}.nearest-neighbor",
            f"{p}.h.mean",
            f"{p}.u.mean",
            f"{p}.w.mean",
            f"{p}.h.std",
            f"{p}.u.std",
            f"{p}.w.std",
            f"{p}.p",
        ]
        values = collector.as_dict()
        assert values[f"{p}.samplesize"] == 50
        assert values[f"{p}.dim"] == 2
        assert values[f"{p}.nearest-neighbor"] == 1
        assert values[f"{p}.h.mean"] == result.statistic
        assert values[f"{p}.p"] == result.p_value
        assert result.warnings == ()

    def test_single_repetition_omits_std(self, uniform_data):
        collector = StatisticsCollector()
        with collector.attached():
            result = hopkins(uniform_data, 50, seed=1)
        names = [name for name, _ in collector.records]
        assert not any(name.endswith('.std') for name in names)
        assert len(names) == 7
        assert result.h_std is None
        assert result.h_var is None

    def test_warning_when_channel_disabled(self, uniform_data, statistics_disabled):
        with pytest.warns(StatisticsChannelWarning):
            result = hopkins(uniform_data, 20, seed=1)
        assert any("statistics channel" in w for w in result.warnings)
        assert 0.0 <= result.statistic <= 1.0

    def test_no_warning_when_not_emitting(self, uniform_data, statistics_disabled):
        result = hopkins(uniform_data, 20, seed=1, emit_statistics=False)
        assert result.warnings == ()


# ═══════════════════════════════════════════════════════════════════════
# Result hierarchy
# ═══════════════════════════════════════════════════════════════════════


class TestHierarchy:

    def test_attached_under_root(self, uniform_data):
        root = object()
        tree = ResultHierarchy(root)
        seen = []
        tree.subscribe(lambda child, parent: seen.append((child, parent)))
        result = run(uniform_data, 20, seed=1, hierarchy=tree)
        assert seen == [(result, root)]
        assert result in tree

    def test_attached_under_parent(self, uniform_data):
        root, parent = object(), object()
        tree = ResultHierarchy(root)
        tree.attach(parent)
        result = run(uniform_data, 20, seed=1, hierarchy=tree, parent=parent)
        assert tree.parent(result) is parent

    def test_unknown_parent_rejected_before_solving(self, uniform_data):
        oracle = RecordingOracle(uniform_data)
        tree = ResultHierarchy(object())
        with pytest.raises(ValidationError):
            run(uniform_data, 20, hierarchy=tree, parent=object(), oracle=oracle)
        assert oracle.calls == 0

    def test_pipeline_evaluates_new_solution(self, uniform_data):
        tree = ResultHierarchy(uniform_data)
        evaluated = []
        EvaluationPipeline(tree, [lambda base, result: evaluated.append(result)])
        result = run(uniform_data, 20, seed=1, hierarchy=tree)
        assert evaluated == [result]


# ═══════════════════════════════════════════════════════════════════════
# Display
# ═══════════════════════════════════════════════════════════════════════


class TestDisplay:

    def test_summary(self, uniform_data):
        text = run(uniform_data, 30, repetitions=3, seed=1).summary()
        assert "HOPKINS STATISTIC OF CLUSTERING TENDENCY" in text
        assert "p-value" in text
        assert "NA" not in text

    def test_summary_single_repetition(self, uniform_data):
        text = run(uniform_data, 30, seed=1).summary()
        assert "NA" in text

    def test_repr(self, uniform_data):
        result = run(uniform_data, 30, seed=1)
        assert isinstance(result, HopkinsSolution)
        assert repr(result).startswith("HopkinsSolution(statistic=")

    def test_timing(self, uniform_data):
        timing = run(uniform_data, 30, seed=1).timing
        assert {'total_seconds', 'oracle', 'extent', 'trials', 'significance'} <= set(timing)
