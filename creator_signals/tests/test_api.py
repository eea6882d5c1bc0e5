"""
Test suite for the analysis API routes.

Exercises every /analysis endpoint through FastAPI's TestClient with the
synthetic population from conftest.py, plus the error mapping:
InvalidInput -> 400, request validation -> 422, optimizer timeout -> 504.
"""

import time
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from creator_signals.api.analysis import score_items
from creator_signals.core.config import Settings
from creator_signals.core.dependencies import build_random_source, get_settings_dependency
from creator_signals.main import app
from creator_signals.models import ItemsRequest
from creator_signals.services.title_optimizer import optimize_title
from creator_signals.tests.conftest import AS_OF


AS_OF_JSON = AS_OF.isoformat()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class TestRandomSource:
    """Tests for the per-request generator factory."""

    def test_request_seed_wins(self) -> None:
        settings = Settings(random_seed=1)
        first = build_random_source(42, settings).random(5)
        second = build_random_source(42, settings).random(5)
        assert first.tolist() == second.tolist()
        assert first.tolist() != build_random_source(None, settings).random(5).tolist()

    def test_configured_seed_used_without_request_seed(self) -> None:
        settings = Settings(random_seed=7)
        first = build_random_source(None, settings).integers(1000, size=5)
        second = build_random_source(None, settings).integers(1000, size=5)
        assert first.tolist() == second.tolist()


# =============================================================================
# Service Endpoints
# =============================================================================


class TestServiceEndpoints:
    """Tests for the root and health endpoints."""

    def test_health(self, client) -> None:
        response = client.get('/health')
        assert response.status_code == 200
        assert response.json() == {'status': 'healthy'}

    def test_root(self, client) -> None:
        body = client.get('/').json()
        assert body['version'] == '1.0.0'
        assert body['docs'] == '/docs'


# =============================================================================
# Population Endpoints
# =============================================================================


class TestPopulationEndpoints:
    """Tests for z-scores, patterns and feature lift."""

    def test_z_scores(self, client, population_payload) -> None:
        response = client.post('/analysis/z-scores', json={'items': population_payload, 'asOf': AS_OF_JSON})

        assert response.status_code == 200
        body = response.json()
        assert body['method'] == 'mad_log'
        assert body['outlierCount'] == 5
        assert body['underperformerCount'] >= 3
        assert len(body['items']) == 30
        assert body['items'][0]['ageInDays'] == 10

    def test_z_scores_classic_method(self, client, population_payload) -> None:
        response = client.post(
            '/analysis/z-scores',
            json={'items': population_payload, 'asOf': AS_OF_JSON, 'method': 'zscore'},
        )
        body = response.json()
        assert body['method'] == 'zscore'
        assert body['outlierCount'] == 5
        assert body['underperformerCount'] == 0

    def test_negative_metric_is_bad_request(self, client, population_payload) -> None:
        population_payload[0]['metricValue'] = -5
        response = client.post('/analysis/z-scores', json={'items': population_payload, 'asOf': AS_OF_JSON})

        assert response.status_code == 400
        assert 'negative' in response.json()['detail']

    def test_unknown_method_is_validation_error(self, client, population_payload) -> None:
        response = client.post('/analysis/z-scores', json={'items': population_payload, 'method': 'iqr'})
        assert response.status_code == 422

    def test_patterns(self, client, population_payload) -> None:
        response = client.post('/analysis/patterns', json={'items': population_payload, 'asOf': AS_OF_JSON})

        assert response.status_code == 200
        body = response.json()
        assert 'startsWithNumber' in {p['featureName'] for p in body['positive']}
        assert 'hasQuestion' in {p['featureName'] for p in body['negative']}

    def test_feature_lift(self, client, population_payload) -> None:
        response = client.post('/analysis/feature-lift', json={'items': population_payload, 'asOf': AS_OF_JSON})

        assert response.status_code == 200
        body = response.json()
        assert body[0]['lift']['liftRatio'] > 5
        ratios = [entry['lift']['liftRatio'] for entry in body]
        assert ratios == sorted(ratios, reverse=True)

    @pytest.mark.asyncio
    async def test_route_function_called_directly(self, population) -> None:
        report = await score_items(ItemsRequest(items=population, asOf=AS_OF), Settings())
        assert report.outlierCount == 5


# =============================================================================
# Statistics Endpoints
# =============================================================================


class TestStatisticsEndpoints:
    """Tests for lift, readability, mean-difference and niche velocity."""

    def test_lift(self, client) -> None:
        response = client.post(
            '/analysis/lift',
            json={'groupWithFeature': [900, 1100, 1000], 'groupWithoutFeature': [400, 600, 500]},
        )
        body = response.json()
        assert response.status_code == 200
        assert body['liftRatio'] == pytest.approx(2.0)
        assert body['significant'] is True

    def test_lift_empty_groups_neutral(self, client) -> None:
        body = client.post('/analysis/lift', json={}).json()
        assert body['liftRatio'] == 1.0
        assert body['pValue'] == 1.0

    def test_readability(self, client) -> None:
        body = client.post('/analysis/readability', json={'text': 'How to Start a Garden'}).json()
        assert body['interpretation'] == 'Very accessible'
        assert body['wordCount'] == 5

    def test_readability_empty(self, client) -> None:
        body = client.post('/analysis/readability', json={'text': ''}).json()
        assert body['score'] == 0
        assert body['interpretation'] == 'Empty'

    def test_flesch_kincaid(self, client) -> None:
        body = client.post('/analysis/flesch-kincaid', json={'text': 'The cat sat on the mat.'}).json()
        assert body['interpretation'] == 'Very easy'
        assert body['sentenceCount'] == 1

    def test_mean_difference(self, client) -> None:
        response = client.post(
            '/analysis/mean-difference',
            json={'sampleA': [10, 12, 11, 13, 9], 'sampleB': [50, 52, 48, 51, 49]},
        )
        body = response.json()
        assert body['difference'] == pytest.approx(-39.0)
        assert body['confidence'] == pytest.approx(0.95)
        assert body['significant'] is True

    def test_mean_difference_invalid_confidence(self, client) -> None:
        response = client.post(
            '/analysis/mean-difference',
            json={'sampleA': [1, 2], 'sampleB': [3, 4], 'confidence': 1.5},
        )
        assert response.status_code == 422

    def test_niche_velocity(self, client) -> None:
        body = client.post(
            '/analysis/niche-velocity',
            json={'velocity': 10000, 'baseline': [100, 200, 300, 400, 500]},
        ).json()
        assert body['percentile'] == 100
        assert body['normalized'] > 2
        assert body['interpretation'] == 'Exceptional for this niche'

    def test_niche_velocity_negative(self, client) -> None:
        response = client.post('/analysis/niche-velocity', json={'velocity': -1, 'baseline': [1, 2]})
        assert response.status_code == 400


# =============================================================================
# Title Optimizer Endpoint
# =============================================================================


class TestOptimizeTitleEndpoint:
    """Tests for POST /analysis/optimize-title."""

    def _payload(self, population_payload, **overrides):
        payload = {
            'title': 'How to Bake Sourdough Bread',
            'items': population_payload,
            'asOf': AS_OF_JSON,
            'iterations': 20,
            'seed': 42,
        }
        payload.update(overrides)
        return payload

    def test_seeded_walk_is_reproducible(self, client, population_payload) -> None:
        first = client.post('/analysis/optimize-title', json=self._payload(population_payload))
        second = client.post('/analysis/optimize-title', json=self._payload(population_payload))

        assert first.status_code == 200
        assert first.json() == second.json()

    def test_result_fields(self, client, population_payload) -> None:
        body = client.post('/analysis/optimize-title', json=self._payload(population_payload)).json()

        assert body['input'] == 'How to Bake Sourdough Bread'
        assert body['acceptedPath'][0]['stepIndex'] == 0
        assert body['bestTitle']['fitnessScore'] >= body['acceptedPath'][0]['fitnessScore']
        assert len(body['walkPath']) <= 8
        assert body['statistics']['outliersAnalyzed'] == 5
        assert body['methodology']['iterations'] == 20

    def test_iterations_capped(self, client, population_payload) -> None:
        body = client.post('/analysis/optimize-title', json=self._payload(population_payload, iterations=500)).json()
        assert body['methodology']['iterations'] == 50

    def test_best_of_batch_strategy(self, client, population_payload) -> None:
        response = client.post(
            '/analysis/optimize-title',
            json=self._payload(population_payload, strategy='best_of_batch'),
        )
        assert response.status_code == 200

    def test_negative_iterations(self, client, population_payload) -> None:
        response = client.post('/analysis/optimize-title', json=self._payload(population_payload, iterations=-1))
        assert response.status_code == 400

    def test_blank_title(self, client, population_payload) -> None:
        response = client.post('/analysis/optimize-title', json=self._payload(population_payload, title='   '))
        assert response.status_code == 400

    def test_empty_title(self, client, population_payload) -> None:
        response = client.post('/analysis/optimize-title', json=self._payload(population_payload, title=''))
        assert response.status_code == 422

    def test_walk_receives_deadline(self, client, population_payload) -> None:
        with patch('creator_signals.api.analysis.optimize_title', wraps=optimize_title) as optimizer:
            response = client.post('/analysis/optimize-title', json=self._payload(population_payload))

        assert response.status_code == 200
        deadline = optimizer.call_args.kwargs['deadline']
        assert isinstance(deadline, float)
        assert deadline > time.monotonic() - 60

    @pytest.mark.slow
    def test_timeout(self, client, population_payload) -> None:
        def slow_optimizer(*args, **kwargs):
            time.sleep(0.5)

        app.dependency_overrides[get_settings_dependency] = lambda: Settings(optimize_timeout_seconds=0.05)
        with patch('creator_signals.api.analysis.optimize_title', side_effect=slow_optimizer):
            response = client.post('/analysis/optimize-title', json=self._payload(population_payload))

        assert response.status_code == 504
