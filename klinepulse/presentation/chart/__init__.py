from klinepulse.presentation.chart.chart_presenter import ChartPresenter

__all__ = ["ChartPresenter"]
