"""
Tests for the CPU nearest-neighbor oracles.

KD-tree answers are checked against brute-force cdist answers, which are
in turn checked against an explicit sort of all pairwise distances.
"""

import numpy as np
import pytest
from scipy.spatial.distance import cdist

from pytendency.core.capabilities import (
    CAPABILITY_BATCH_QUERY,
    CAPABILITY_GPU_NATIVE,
    CAPABILITY_THREAD_SAFE,
)
from pytendency.core.exceptions import OracleFailureError
from pytendency.neighbors import BruteForceOracle, KDTreeOracle, build_oracle


@pytest.fixture
def corpus(rng):
    return rng.random((200, 3))


@pytest.fixture
def queries(rng):
    return rng.random((25, 3))


class TestBruteForce:

    @pytest.mark.parametrize("rank", [1, 2, 5, 200])
    def test_matches_sorted_distances(self, corpus, queries, rank):
        expected = np.sort(cdist(queries, corpus), axis=1)[:, rank - 1]
        actual = BruteForceOracle(corpus).knn_distances(queries, rank)
        np.testing.assert_array_equal(actual, expected)

    def test_other_metric(self, corpus, queries):
        oracle = BruteForceOracle(corpus, metric='cosine')
        expected = np.sort(cdist(queries, corpus, metric='cosine'), axis=1)[:, 0]
        np.testing.assert_allclose(oracle.knn_distances(queries, 1), expected)
        assert oracle.name == 'brute_cosine'

    def test_metric_kwargs(self, corpus, queries):
        oracle = BruteForceOracle(corpus, metric='minkowski', p=3)
        expected = np.sort(cdist(queries, corpus, metric='minkowski', p=3), axis=1)[:, 1]
        np.testing.assert_allclose(oracle.knn_distances(queries, 2), expected)

    def test_callable_metric_name(self, corpus):
        oracle = BruteForceOracle(corpus, metric=lambda u, v: float(np.abs(u - v).max()))
        assert oracle.name == 'brute_callable'


class TestKDTree:

    @pytest.mark.parametrize("rank", [1, 2, 7])
    def test_matches_brute_force_euclidean(self, corpus, queries, rank):
        kd = KDTreeOracle(corpus).knn_distances(queries, rank)
        brute = BruteForceOracle(corpus).knn_distances(queries, rank)
        np.testing.assert_allclose(kd, brute, rtol=1e-12)

    @pytest.mark.parametrize("p,metric", [(1.0, 'cityblock'), (np.inf, 'chebyshev')])
    def test_matches_brute_force_other_norms(self, corpus, queries, p, metric):
        kd = KDTreeOracle(corpus, p=p).knn_distances(queries, 3)
        brute = BruteForceOracle(corpus, metric=metric).knn_distances(queries, 3)
        np.testing.assert_allclose(kd, brute, rtol=1e-12)

    def test_corpus_point_rank_one_is_zero(self, corpus):
        oracle = KDTreeOracle(corpus)
        assert oracle.knn_distance(corpus[17], 1) == 0.0
        assert oracle.knn_distance(corpus[17], 2) > 0.0

    def test_single_point_matches_batch(self, corpus, queries):
        oracle = KDTreeOracle(corpus)
        batch = oracle.knn_distances(queries, 2)
        single = [oracle.knn_distance(q, 2) for q in queries]
        np.testing.assert_array_equal(batch, single)

    def test_capabilities(self, corpus):
        oracle = KDTreeOracle(corpus)
        assert oracle.supports(CAPABILITY_BATCH_QUERY)
        assert oracle.supports(CAPABILITY_THREAD_SAFE)
        assert not oracle.supports(CAPABILITY_GPU_NATIVE)
        assert oracle.name == 'kdtree'
        assert oracle.n_points == 200


class TestRankErrors:

    @pytest.mark.parametrize("oracle_type", [KDTreeOracle, BruteForceOracle])
    def test_rank_exceeds_corpus(self, oracle_type):
        oracle = oracle_type(np.zeros((3, 2)))
        with pytest.raises(OracleFailureError) as exc_info:
            oracle.knn_distance([0.0, 0.0], 4)
        assert exc_info.value.rank == 4

    @pytest.mark.parametrize("oracle_type", [KDTreeOracle, BruteForceOracle])
    def test_rank_zero(self, oracle_type):
        oracle = oracle_type(np.zeros((3, 2)))
        with pytest.raises(OracleFailureError):
            oracle.knn_distance([0.0, 0.0], 0)

    def test_wrong_query_dimension(self, corpus):
        with pytest.raises(OracleFailureError, match="expected"):
            KDTreeOracle(corpus).knn_distance([0.0, 0.0], 1)


class TestBuildOracle:

    @pytest.mark.parametrize("metric", ['euclidean', 'manhattan', 'cityblock', 'chebyshev'])
    def test_kdtree_metrics(self, corpus, metric):
        assert isinstance(build_oracle(corpus, metric), KDTreeOracle)

    def test_minkowski_uses_kdtree(self, corpus, queries):
        oracle = build_oracle(corpus, 'minkowski', p=3)
        assert isinstance(oracle, KDTreeOracle)
        brute = BruteForceOracle(corpus, metric='minkowski', p=3)
        np.testing.assert_allclose(
            oracle.knn_distances(queries, 1), brute.knn_distances(queries, 1), rtol=1e-12
        )

    def test_other_metrics_use_brute_force(self, corpus):
        assert isinstance(build_oracle(corpus, 'cosine'), BruteForceOracle)

    def test_metric_kwargs_force_brute_force(self, corpus):
        oracle = build_oracle(corpus, 'seuclidean', V=np.ones(3))
        assert isinstance(oracle, BruteForceOracle)
