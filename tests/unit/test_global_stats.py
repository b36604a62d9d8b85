from creche_survey.services.global_stats import (
    aggregate_global_questions,
    facility_rankings,
    manager_stats,
    optimize_csp,
)


def test_questions_merged_across_facilities(analysis):
    questions = aggregate_global_questions(analysis.facilities)
    horaires = questions["les_horaires_vous_conviennent_ils"]
    assert horaires.answers == {"Oui": 2, "Non": 2}
    assert horaires.total_responses == 4
    assert horaires.establishment_count == 2
    assert horaires.by_manager["AGES"].answers == {"Oui": 1}
    assert horaires.by_manager["Ville de Strasbourg"].answers == {"Oui": 1, "Non": 2}


def test_kind_flags_are_combined(analysis):
    ateliers = aggregate_global_questions(analysis.facilities)["quels_ateliers_appr_ciez_vous"]
    assert ateliers.is_multi_options
    assert ateliers.answers == {"Peinture": 1, "Musique": 2, "Lecture": 1}
    assert ateliers.establishment_count == 2


def test_open_answers_tagged_with_manager(analysis):
    remarks = aggregate_global_questions(analysis.facilities)["avez_vous_des_remarques"]
    assert [r.manager for r in remarks.responses_list] == ["Ville de Strasbourg"] * 2
    assert analysis.facilities["Crèche Alpha"].question_stats[
        "avez_vous_des_remarques"
    ].responses_list[0].manager is None


def test_questions_sorted_by_column(analysis):
    questions = aggregate_global_questions(analysis.facilities)
    indices = [q.column_index for q in questions.values()]
    assert indices == sorted(indices)


def test_optimize_csp_folds_small_buckets():
    csp = {f"CSP {i}": 10 - i for i in range(8)}
    csp["Profession intermédiaire administrative"] = 20
    optimized = optimize_csp(csp)
    assert optimized["Profession intermédiai..."] == 20
    assert optimized["Autres CSP"] == 5 + 4 + 3
    assert len(optimized) == 7


def test_manager_stats_and_rankings(analysis):
    managers = manager_stats(analysis.facilities)
    assert managers["Ville de Strasbourg"].facilities == ["Crèche Alpha"]
    assert managers["Ville de Strasbourg"].satisfaction_score == 67
    assert managers["AGES"].satisfaction_score == 100
    ranking = {r.name: r for r in facility_rankings(analysis.facilities)}
    assert ranking["Crèche Beta"].satisfaction == 100
    assert ranking["Crèche Alpha"].total_responses == 3


def test_global_stats(analysis):
    stats = analysis.global_stats()
    assert stats.metadata.total_facilities == 2
    assert stats.metadata.total_responses == 4
    assert stats.metadata.survey_period == "15/03/2023 - 18/03/2023"
    assert stats.satisfaction.score == 75
    assert stats.demographics.gender == {"Femme": 2, "Homme": 2}
    assert stats.demographics.csp == {"Cadre": 2, "Employé": 1}
    assert stats.demographics.facilities_by_manager == {"Ville de Strasbourg": 1, "AGES": 1}
    assert stats.comparative.top_satisfaction[0].name == "Crèche Beta"
    assert stats.comparative.most_responses[0].name == "Crèche Alpha"
    assert len(stats.comparative.by_size["small"]) == 2
