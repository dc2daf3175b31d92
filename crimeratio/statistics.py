"""Two-sample Poisson rate-ratio test.

Compares two event rates (count per unit exposure) using the normal
approximation to the log rate ratio. The standard error of the log ratio
is ``sqrt(1/count1 + 1/count2)``; the p-value is two-sided and the
confidence interval is the 95% Wald interval back-transformed with exp().

No continuity correction or exact Poisson interval is applied. The normal
CDF uses the Abramowitz-Stegun 7.1.26 approximation to erf (maximum
absolute error about 1.5e-7).
"""

import math
import sys

from pydantic import BaseModel, ConfigDict, Field

# Two-sided 95% normal quantile
Z_95 = 1.96

# Log-scale bounds outside which exp() leaves the normal float range
_LOG_MAX = math.log(sys.float_info.max)
_LOG_MIN = math.log(sys.float_info.min)

# Abramowitz & Stegun 7.1.26 coefficients
_ERF_A1 = 0.254829592
_ERF_A2 = -0.284496736
_ERF_A3 = 1.421413741
_ERF_A4 = -1.453152027
_ERF_A5 = 1.061405429
_ERF_P = 0.3275911


def erf(x: float) -> float:
    """Rational approximation of the error function."""
    sign = 1.0 if x >= 0 else -1.0
    x = abs(x)

    t = 1.0 / (1.0 + _ERF_P * x)
    poly = ((((_ERF_A5 * t + _ERF_A4) * t + _ERF_A3) * t + _ERF_A2) * t + _ERF_A1) * t
    y = 1.0 - poly * math.exp(-x * x)

    return sign * y


def normal_cdf(x: float) -> float:
    """Standard normal cumulative distribution function."""
    return 0.5 * (1.0 + erf(x / math.sqrt(2.0)))


def _positive_finite(value: float) -> bool:
    return math.isfinite(value) and value > 0


class RateRatioStats(BaseModel):
    """Outcome of a rate-ratio test between two regions."""

    model_config = ConfigDict(frozen=True)

    rate1: float = Field(ge=0, description="Events per unit exposure in region 1")
    rate2: float = Field(ge=0, description="Events per unit exposure in region 2")
    ratio: float = Field(ge=0, description="rate1 / rate2")
    p_value: float = Field(ge=0, le=1, description="Two-sided p-value for ratio == 1")
    ci_low: float = Field(ge=0, description="Lower bound of the 95% confidence interval")
    ci_high: float = Field(ge=0, description="Upper bound of the 95% confidence interval")


def rate_ratio_test(
    count1: int,
    exposure1: float,
    count2: int,
    exposure2: float,
) -> RateRatioStats | None:
    """Test whether two Poisson rates differ.

    Args:
        count1: Events observed in region 1
        exposure1: Exposure of region 1 (e.g. area in km²)
        count2: Events observed in region 2
        exposure2: Exposure of region 2

    Returns:
        RateRatioStats, or None when either count is zero, either exposure
        is not a positive finite number, or the rates, ratio or confidence
        bounds fall outside the positive finite float range. None means
        there is not enough data for the test; it is not an error.

    Example:
        >>> stats = rate_ratio_test(100, math.pi, 50, 3 * math.pi)
        >>> round(stats.ratio, 6)
        6.0
    """
    if count1 <= 0 or count2 <= 0:
        return None
    if not (_positive_finite(exposure1) and _positive_finite(exposure2)):
        return None

    rate1 = count1 / exposure1
    rate2 = count2 / exposure2
    if not (_positive_finite(rate1) and _positive_finite(rate2)):
        return None

    ratio = rate1 / rate2
    if not _positive_finite(ratio):
        return None

    log_ratio = math.log(ratio)
    standard_error = math.sqrt(1 / count1 + 1 / count2)
    margin = Z_95 * standard_error
    if log_ratio - margin < _LOG_MIN or log_ratio + margin > _LOG_MAX:
        return None

    z = log_ratio / standard_error
    p_value = 2 * (1 - normal_cdf(abs(z)))

    ci_low = math.exp(log_ratio - margin)
    ci_high = math.exp(log_ratio + margin)

    return RateRatioStats(
        rate1=rate1,
        rate2=rate2,
        ratio=ratio,
        p_value=p_value,
        ci_low=ci_low,
        ci_high=ci_high,
    )
