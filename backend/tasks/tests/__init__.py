# tasks/tests/__init__.py
"""
Task Sequencer Test Suite
=========================

Modules:
--------
- test_scoring: Full and reduced scoring formulas, rating normalisation
- test_sequencing: QuickWin, EatTheFrog and the end rule
- test_shuffle: Rule placement and the persisted-score shuffle
- test_profiles: Onboarding conversion and energy-state derivation
- test_api: HTTP endpoints

Running Tests:
--------------
    python manage.py test tasks
    python manage.py test tasks.tests.test_sequencing -v 2
    pytest
"""
