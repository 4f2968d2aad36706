from .risk_engine import RiskEngine
from .performance import PerformanceAnalyzer
from .rebalancer import Rebalancer
from .income import IncomeProjector
from .instrument_risk import InstrumentRiskAssessor
