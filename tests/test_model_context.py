import numpy as np

from medreport.extraction_rules import BUCKETS
from medreport.model_context import PlaceholderModel, ProcessingContext


def test_model_disabled_by_default():
    ctx = ProcessingContext()
    assert ctx.ensure_model() is None
    ctx.release()


def test_ensure_model_is_idempotent():
    ctx = ProcessingContext(enable_model=True)
    model = ctx.ensure_model()
    assert ctx.ensure_model() is model
    assert model.weights.shape == (64, len(BUCKETS))
    assert model.weights.dtype == np.float32
    assert not model.is_trained


def test_release_is_safe_to_repeat():
    model = PlaceholderModel()
    ctx = ProcessingContext(enable_model=True, model_factory=lambda: model)
    ctx.ensure_model()
    ctx.release()
    ctx.release()
    assert not model.is_loaded
    assert ctx.model is None


def test_context_manager_releases_on_error():
    model = PlaceholderModel()
    try:
        with ProcessingContext(enable_model=True, model_factory=lambda: model) as ctx:
            ctx.ensure_model()
            raise KeyError("boom")
    except KeyError:
        pass
    assert not model.is_loaded
