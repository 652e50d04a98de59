from .response_model import band_gain_at, hit_test, sample_curve, total_gain_at

__all__ = ["band_gain_at", "hit_test", "sample_curve", "total_gain_at"]
