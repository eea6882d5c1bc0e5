'''
Creator Signals Test Suite

Test Modules:
-------------
- test_robust_statistics.py: median, MAD, log-domain z-scores, percentiles,
  niche-normalized velocity
- test_outliers.py: item ages, velocities and outlier/underperformer flags
  under both scoring methods
- test_feature_extraction.py: fixed title-feature vocabulary and detectors
- test_lift_analysis.py: lift ratio, Welch's t-test, feature-lift report
- test_readability.py: character readability, Flesch-Kincaid, mean-difference
  confidence intervals
- test_pattern_learning.py: positive/negative patterns, gates, outlier
  vocabulary and word-count window
- test_title_optimizer.py: mutations, fitness, Metropolis-Hastings walk
- test_api.py: /analysis routes and HTTP error mapping

Running Tests:
--------------
    pip install -e ".[test]"
    pytest -v

Configuration:
--------------
See conftest.py for the synthetic population and shared fixtures.
'''

__all__ = []
