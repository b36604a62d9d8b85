from creche_survey.viz.registry import charts
from creche_survey.viz.strategies.csp_distribution import CspDistributionStrategy
from creche_survey.viz.strategies.facility_ranking import FacilityRankingStrategy
from creche_survey.viz.strategies.question_distribution import QuestionDistributionStrategy
from creche_survey.viz.strategies.satisfaction_by_manager import SatisfactionByManagerStrategy
from creche_survey.viz.strategies.satisfaction_distribution import SatisfactionDistributionStrategy

# Register default strategies at import time
charts.register("satisfaction_distribution", SatisfactionDistributionStrategy())
charts.register("satisfaction_by_manager", SatisfactionByManagerStrategy())
charts.register("question_distribution", QuestionDistributionStrategy())
charts.register("csp_distribution", CspDistributionStrategy())
charts.register("facility_ranking", FacilityRankingStrategy())
