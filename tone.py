import re
from enum import IntEnum

import numpy as np


class DisplayTransform(IntEnum):
    LINEAR = 0
    SRGB = 1
    REC709 = 2
    ACES_SRGB = 3
    ACES_REC709 = 4
    ACES_DCI_P3 = 5

    @property
    def label(self):
        return _LABELS[self]

    @classmethod
    def from_index(cls, value):
        """Parse a colorspace selector (0-5). Anything else is rejected, never defaulted."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            value = value.strip()
            if not re.fullmatch(r'-?[0-9]+', value):
                raise ValueError(f"Invalid colorspace selector: {value!r} (expected 0-5)")
            value = int(value)
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            raise ValueError(f"Invalid colorspace selector: {value!r} (expected 0-5)")
        try:
            return cls(int(value))
        except ValueError:
            raise ValueError(f"Invalid colorspace selector: {value} (expected 0-5)") from None


_LABELS = {
    DisplayTransform.LINEAR: "Linear",
    DisplayTransform.SRGB: "sRGB",
    DisplayTransform.REC709: "Rec. 709",
    DisplayTransform.ACES_SRGB: "ACES sRGB",
    DisplayTransform.ACES_REC709: "ACES Rec. 709",
    DisplayTransform.ACES_DCI_P3: "ACES DCI-P3",
}


# Stephen Hill's fit of the ACES RRT+ODT. Rows map to output channels.
ACES_INPUT_MATRIX = np.array([
    [0.59719, 0.35458, 0.04823],
    [0.07600, 0.90834, 0.01566],
    [0.02840, 0.13383, 0.83777],
])

ACES_OUTPUT_MATRIX = np.array([
    [1.60475, -0.53108, -0.07367],
    [-0.10208, 1.10813, -0.00605],
    [-0.00327, -0.07276, 1.07602],
])

SRGB_BREAK = 0.0031308
REC709_BREAK = 0.0181


def linear_curve(v):
    return np.asarray(v, dtype=np.float64)


def srgb_curve(v):
    v = np.asarray(v, dtype=np.float64)
    # keep the power branch away from negative bases; np.where evaluates both sides
    return np.where(v < SRGB_BREAK, 12.92 * v,
                    1.055 * np.power(np.maximum(v, SRGB_BREAK), 1.0 / 2.4) - 0.055)


def rec709_curve(v):
    v = np.asarray(v, dtype=np.float64)
    return np.where(v < REC709_BREAK, 4.5 * v,
                    1.0993 * np.power(np.maximum(v, REC709_BREAK), 0.45) - 0.0993)


TRANSFER_CURVES = {
    'linear': linear_curve,
    'srgb': srgb_curve,
    'rec709': rec709_curve,
}


def apply_transfer_curve(curve, rgb):
    try:
        fn = TRANSFER_CURVES[curve]
    except KeyError:
        raise ValueError(f"Unknown transfer curve: {curve!r}") from None
    return fn(rgb)


def apply_matrix(matrix, rgb):
    # All three outputs are dot products against the untouched input triple.
    rgb = np.asarray(rgb, dtype=np.float64)
    return rgb @ np.asarray(matrix, dtype=np.float64).T


def rrt_and_odt_fit(v):
    v = np.asarray(v, dtype=np.float64)
    a = v * (v + 0.0245786) - 0.000090537
    b = v * (0.983729 * v + 0.4329510) + 0.238081
    return a / b


def aces_fitted(rgb):
    rgb = apply_matrix(ACES_INPUT_MATRIX, rgb)
    rgb = rrt_and_odt_fit(rgb)
    return apply_matrix(ACES_OUTPUT_MATRIX, rgb)


def _linear(rgb):
    return linear_curve(rgb)


def _srgb(rgb):
    return srgb_curve(rgb)


def _rec709(rgb):
    return rec709_curve(rgb)


def _aces_srgb(rgb):
    return srgb_curve(aces_fitted(rgb))


def _aces_rec709(rgb):
    # Shares the sRGB curve with ACES sRGB; no Rec. 709 encoding yet.
    return srgb_curve(aces_fitted(rgb))


def _aces_dci_p3(rgb):
    # No P3 primaries conversion, only the sRGB curve.
    return srgb_curve(aces_fitted(rgb))


PIPELINES = {
    DisplayTransform.LINEAR: _linear,
    DisplayTransform.SRGB: _srgb,
    DisplayTransform.REC709: _rec709,
    DisplayTransform.ACES_SRGB: _aces_srgb,
    DisplayTransform.ACES_REC709: _aces_rec709,
    DisplayTransform.ACES_DCI_P3: _aces_dci_p3,
}


def apply_transform(mode, rgb):
    return PIPELINES[DisplayTransform.from_index(mode)](rgb)
