"""Test configuration for the phone price toolbox."""

from pathlib import Path
import sys

import matplotlib
import numpy as np
import pandas as pd
import pytest


matplotlib.use("Agg")

# Ensure the local package is importable when the repo isn't installed.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

RAW_HEADERS = [
    "Product_id",
    "Price",
    "Sale",
    "weight",
    "resoloution",
    "ppi",
    "cpu core",
    "cpu freq",
    "internal mem",
    "ram",
    "RearCam",
    "Front_Cam",
    "battery",
    "thickness",
]

CORE_EFFECT = {2: 0.0, 4: 150.0, 6: 350.0, 8: 350.0}
MEMORY_EFFECT = {4: 0.0, 8: 60.0, 16: 140.0, 32: 220.0, 64: 320.0}
PLACEHOLDER_ROWS = [3, 11, 40]


def make_raw_phone_frame(n: int = 90, seed: int = 7) -> pd.DataFrame:
    """Synthetic raw table with the same layout and quirks as the real file.

    - ``battery`` is nearly a linear combination of ``weight`` and ``thickness``.
    - ``weight`` has no effect on price. The noise on the rows that survive
      cleaning is orthogonal to their full design, so the fitted ``weight``
      coefficient is exactly zero and dropping it lowers AIC by exactly 2.
    - some memory values are encoded as fractions (``0.016`` meaning 16 GB).
    - rows ``PLACEHOLDER_ROWS`` carry ``0`` placeholders in ``cpu core`` / ``internal mem``.
    - ``cpu core == 6`` is priced like ``8``.
    - the last three rows duplicate earlier ones apart from the product id.
    """
    rng = np.random.default_rng(seed)
    weight_z = rng.normal(size=n)
    thickness_z = rng.normal(size=n)
    weight = (150 + 20 * weight_z).round(1)
    thickness = (8 + 1.5 * thickness_z).round(2)
    battery = 2500 + 400 * (weight_z + thickness_z + rng.normal(scale=0.5, size=n))
    ppi = rng.normal(330, 90, size=n).round(0)
    freq = rng.uniform(1.0, 2.6, size=n).round(2)
    core = rng.choice([2, 4, 8], size=n, p=[0.3, 0.35, 0.35])
    core[[5, 17]] = 6
    memory = rng.choice([4, 8, 16, 32, 64], size=n).astype(float)
    noise = rng.normal(scale=40, size=n)

    kept = np.setdiff1d(np.arange(n), PLACEHOLDER_ROWS)
    design = np.column_stack(
        [
            np.ones(len(kept)),
            weight[kept],
            ppi[kept],
            freq[kept],
            thickness[kept],
            pd.get_dummies(np.where(core[kept] == 6, 8, core[kept]), drop_first=True, dtype=float).to_numpy(),
            pd.get_dummies(memory[kept], drop_first=True, dtype=float).to_numpy(),
        ],
    )
    q, _ = np.linalg.qr(design)
    noise[kept] -= q @ (q.T @ noise[kept])
    price = (
        400
        + 1.5 * ppi
        + 400 * freq
        - 50 * thickness
        + np.array([CORE_EFFECT[c] for c in core])
        + np.array([MEMORY_EFFECT[int(m)] for m in memory])
        + noise
    )
    memory[::7] = memory[::7] / 1000
    core[[3, 40]] = 0
    memory[[11]] = 0

    df = pd.DataFrame(
        {
            "Product_id": np.arange(1, n + 1),
            "Price": price,
            "Sale": rng.integers(10, 9000, size=n),
            "weight": weight,
            "resoloution": rng.uniform(4.0, 6.5, size=n).round(1),
            "ppi": ppi,
            "cpu core": core,
            "cpu freq": freq,
            "internal mem": memory,
            "ram": rng.choice([1.0, 2.0, 3.0, 4.0], size=n),
            "RearCam": rng.choice([8.0, 12.0, 13.0, 16.0], size=n),
            "Front_Cam": rng.choice([2.0, 5.0, 8.0], size=n),
            "battery": battery.round(0),
            "thickness": thickness,
        },
        columns=RAW_HEADERS,
    )
    dupes = df.iloc[[0, 1, 2]].assign(Product_id=[n + 1, n + 2, n + 3])
    return pd.concat([df, dupes], ignore_index=True)


@pytest.fixture(scope="session")
def raw_phone_frame() -> pd.DataFrame:
    """Raw synthetic frame with the original CSV headers."""
    return make_raw_phone_frame()


@pytest.fixture(scope="session")
def raw_dataset(raw_phone_frame):
    """Raw dataset with relabelled columns, not yet cleaned."""
    from phone_tlbx.data import PhoneDataset

    return PhoneDataset.from_frame(raw_phone_frame)


@pytest.fixture(scope="session")
def cleaned_dataset(raw_dataset):
    """Dataset after the default cleaning steps."""
    return raw_dataset.cleaned()


@pytest.fixture(scope="session")
def phone_view(cleaned_dataset):
    """Frozen model view over all seven covariates."""
    return cleaned_dataset.model_view()


@pytest.fixture(scope="session")
def phone_csv(raw_phone_frame, tmp_path_factory) -> Path:
    """The synthetic raw frame written to disk with its original headers."""
    path = tmp_path_factory.mktemp("data") / "cellphone.csv"
    raw_phone_frame.to_csv(path, index=False)
    return path


@pytest.fixture
def collinear_view():
    """Continuous-only view where ``x3`` is an exact linear combination of ``x1`` and ``x2``."""
    from phone_tlbx.data import ContinuousCovariate
    from phone_tlbx.data.views import ModelView

    rng = np.random.default_rng(0)
    x1 = rng.normal(size=40)
    x2 = rng.normal(size=40)
    df = pd.DataFrame({"y": 1 + x1 + rng.normal(size=40), "x1": x1, "x2": x2, "x3": x1 + 2 * x2})
    return ModelView(
        df=df,
        target_col="y",
        covariates={name: ContinuousCovariate(name) for name in ("x1", "x2", "x3")},
    )
