from __future__ import annotations

import ipywidgets as w


class ProgressBar:
    """
    Notebook progress bar usable directly as an ingestion progress callback.

        bar = ProgressBar("Loading")
        display(bar.widget)
        build_animation_data(mapping, files, on_progress=bar)

    Values are clamped to [0, 100]. The bar turns green at 100.
    Note: when fed from AnimationLoader, calls arrive on the worker thread; ipywidgets
    traitlet updates are safe to issue from there.
    """

    def __init__(self, description: str = "Loading", *, width: str = "50%") -> None:
        self.bar = w.IntProgress(value=0, min=0, max=100, description=description, layout=w.Layout(width=width))
        self.label = w.HTML("0%")
        self.widget = w.HBox([self.bar, self.label])

    def __call__(self, percent: float) -> None:
        value = int(round(min(max(float(percent), 0.0), 100.0)))
        self.bar.value = value
        self.label.value = f"{value}%"
        self.bar.bar_style = "success" if value >= 100 else ""

    def reset(self) -> None:
        self.bar.bar_style = ""
        self(0)

    @property
    def value(self) -> int:
        return int(self.bar.value)
