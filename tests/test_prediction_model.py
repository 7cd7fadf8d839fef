"""Tests for logistic regression, cross-validation and model artifacts."""

import json

import numpy as np
import pytest

from sentiment_api.core.prediction import (
    FeatureScaler,
    LogisticRegression,
    LogisticRegressionCV,
    ModelArtifact,
    cross_validate,
    k_fold_split,
    sigmoid,
)
from sentiment_api.domain.exceptions import (
    EmptyDatasetError,
    InvalidArgumentError,
    LengthMismatchError,
    ModelLoadError,
    ModelNotFittedError,
)

SEPARABLE_X = np.array([[-2.0], [-1.5], [-1.0], [1.0], [1.5], [2.0]])
SEPARABLE_Y = np.array([0, 0, 0, 1, 1, 1])


def interleaved_dataset(n: int = 40) -> tuple[np.ndarray, np.ndarray]:
    """Two well separated classes, alternating so every fold sees both."""
    labels = np.arange(n) % 2
    offsets = (np.arange(n) % 5) * 0.02
    features = np.column_stack([labels * 2.0 - 1.0 + offsets, offsets])
    return features, labels


# ============================================================================
# Logistic regression
# ============================================================================


def test_sigmoid_is_stable():
    assert sigmoid(0.0) == pytest.approx(0.5)
    values = sigmoid(np.array([-1e6, 1e6]))
    assert np.all(np.isfinite(values))
    assert values[1] == pytest.approx(1.0)


def test_fits_separable_data():
    model = LogisticRegression().fit(SEPARABLE_X, SEPARABLE_Y)

    assert model.is_fitted
    assert model.weights[0] > 0
    assert model.score(SEPARABLE_X, SEPARABLE_Y) == 1.0
    assert model.predict([[3.0], [-3.0]]).tolist() == [1, 0]
    assert 1 <= model.n_iterations <= 1000


def test_training_is_deterministic():
    first = LogisticRegression().fit(SEPARABLE_X, SEPARABLE_Y)
    second = LogisticRegression().fit(SEPARABLE_X, SEPARABLE_Y)

    np.testing.assert_array_equal(first.weights, second.weights)
    assert first.bias == second.bias


def test_stronger_regularization_shrinks_weights():
    weak = LogisticRegression(regularization=10.0).fit(SEPARABLE_X, SEPARABLE_Y)
    strong = LogisticRegression(regularization=0.1).fit(SEPARABLE_X, SEPARABLE_Y)

    assert abs(strong.weights[0]) < abs(weak.weights[0])


def test_predict_proba_shape():
    model = LogisticRegression().fit(SEPARABLE_X, SEPARABLE_Y)

    probabilities = model.predict_proba(SEPARABLE_X)

    assert probabilities.shape == (6,)
    assert np.all((probabilities >= 0) & (probabilities <= 1))
    assert model.predict_proba(np.empty((0, 1))).shape == (0,)


def test_model_errors():
    with pytest.raises(ModelNotFittedError):
        LogisticRegression().predict([[1.0]])
    with pytest.raises(EmptyDatasetError):
        LogisticRegression().fit(np.empty((0, 2)), [])
    with pytest.raises(LengthMismatchError):
        LogisticRegression().fit([[1.0], [2.0]], [1])
    with pytest.raises(InvalidArgumentError):
        LogisticRegression(regularization=0)
    with pytest.raises(InvalidArgumentError):
        LogisticRegression().fit(SEPARABLE_X, SEPARABLE_Y).predict([[1.0, 2.0]])


def test_get_params():
    params = LogisticRegression(learning_rate=0.05).get_params()
    assert params["learning_rate"] == 0.05
    assert params["weights"] is None


# ============================================================================
# Cross-validation
# ============================================================================


def test_k_fold_split_partitions_indices():
    folds = k_fold_split(10, 3)

    assert [len(f.test_indices) for f in folds] == [3, 3, 4]
    all_test = np.concatenate([f.test_indices for f in folds])
    assert sorted(all_test.tolist()) == list(range(10))
    for fold in folds:
        assert set(fold.train_indices) | set(fold.test_indices) == set(range(10))
        assert not set(fold.train_indices) & set(fold.test_indices)
    assert folds[0].test_indices.tolist() == [0, 1, 2]


@pytest.mark.parametrize("n", [2, 7, 10, 29])
def test_k_fold_split_partitions_for_every_k(n):
    for k in range(2, n + 1):
        folds = k_fold_split(n, k)

        assert len(folds) == k
        sizes = [len(f.test_indices) for f in folds]
        assert sizes[:-1] == [n // k] * (k - 1)
        assert sizes[-1] == n - (k - 1) * (n // k)
        all_test = np.concatenate([f.test_indices for f in folds])
        assert all_test.tolist() == list(range(n))
        for fold in folds:
            assert len(fold.train_indices) + len(fold.test_indices) == n
            assert not set(fold.train_indices) & set(fold.test_indices)


def test_k_fold_split_boundaries():
    assert [f.test_indices.tolist() for f in k_fold_split(5, 5)] == [[0], [1], [2], [3], [4]]
    assert [f.test_indices.tolist() for f in k_fold_split(5, 2)] == [[0, 1], [2, 3, 4]]


@pytest.mark.parametrize("n,k", [(10, 1), (5, 6), (5, 0)])
def test_k_fold_split_rejects_bad_k(n, k):
    with pytest.raises(InvalidArgumentError):
        k_fold_split(n, k)


def test_cross_validate_separable_data():
    X, y = interleaved_dataset()

    results = cross_validate(X, y, k=4)

    assert len(results.scores) == 4
    assert results.mean_score > 0.9
    assert results.std_score == pytest.approx(float(np.std(results.scores)))


def test_cross_validate_uses_population_std():
    X, y = interleaved_dataset()
    results = cross_validate(X, y, k=4)
    scores = np.array(results.scores)
    population = np.sqrt(np.mean((scores - scores.mean()) ** 2))
    assert results.std_score == pytest.approx(population)


def test_logistic_regression_cv_fits_full_dataset():
    X, y = interleaved_dataset()
    model = LogisticRegressionCV(learning_rate=0.05)

    assert model.cv_scores == []
    assert model.mean_cv_score is None

    model.fit_cv(X, y, k=8)

    assert len(model.cv_scores) == 8
    assert model.mean_cv_score == pytest.approx(np.mean(model.cv_scores))
    assert model.is_fitted
    assert model.learning_rate == 0.05
    assert model.cv_results.to_dict()["scores"] == model.cv_scores


def test_logistic_regression_cv_validates_input():
    with pytest.raises(LengthMismatchError):
        LogisticRegressionCV().fit_cv(np.ones((10, 2)), np.ones(9), k=2)
    with pytest.raises(EmptyDatasetError):
        LogisticRegressionCV().fit_cv(np.empty((0, 2)), np.empty(0), k=2)


# ============================================================================
# Artifacts
# ============================================================================


def fitted_artifact() -> ModelArtifact:
    X, y = interleaved_dataset()
    scaler = FeatureScaler()
    model = LogisticRegression().fit(scaler.fit_transform(X), y)
    return ModelArtifact(model=model, scaler=scaler, feature_names=["signal", "offset"], horizon=1)


def test_artifact_save_and_load(tmp_path):
    artifact = fitted_artifact()
    X, _ = interleaved_dataset()

    path = artifact.save(tmp_path / "models" / "next.json")
    loaded = ModelArtifact.load(path)

    np.testing.assert_allclose(loaded.predict_proba(X), artifact.predict_proba(X))
    assert loaded.horizon == 1
    assert loaded.feature_names == ["signal", "offset"]
    assert json.loads(path.read_text())["format_version"] == 1


def test_artifact_requires_paired_scaler():
    data = fitted_artifact().to_dict()
    del data["scaler"]

    with pytest.raises(ModelLoadError, match="scaler"):
        ModelArtifact.from_dict(data)


def test_artifact_requires_weights():
    data = fitted_artifact().to_dict()
    data["model"]["weights"] = None

    with pytest.raises(ModelLoadError):
        ModelArtifact.from_dict(data)


def test_artifact_rejects_feature_count_mismatch():
    data = fitted_artifact().to_dict()
    data["scaler"]["mean"] = [0.0]
    data["scaler"]["std"] = [1.0]

    with pytest.raises(ModelLoadError):
        ModelArtifact.from_dict(data)


def test_artifact_rejects_unfitted_model():
    with pytest.raises(ModelLoadError):
        ModelArtifact(
            model=LogisticRegression(),
            scaler=FeatureScaler().fit([[1.0], [2.0]]),
            feature_names=["x"],
        )


def test_artifact_load_unreadable_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")

    with pytest.raises(ModelLoadError) as exc_info:
        ModelArtifact.load(path)
    assert exc_info.value.model_path == str(path)
