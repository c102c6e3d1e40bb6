"""Default accountability questions asked on step 3 of the questionnaire."""
from typing import List

from domain.models import AccountabilityQuestion

GENERAL_FUND = "Redirect my support to the Every Nation World Missions General Fund"

ACCOUNTABILITY_QUESTIONS: List[AccountabilityQuestion] = [
    AccountabilityQuestion(
        question="If the missioner is UNABLE TO GO due to unforeseen reasons, please*",
        choices=("Redirect my support to the team fund", GENERAL_FUND),
    ),
    AccountabilityQuestion(
        question="If the missioner or team is REROUTED, please*",
        choices=("Retain my support", GENERAL_FUND),
    ),
    AccountabilityQuestion(
        question="If the trip is CANCELED, please*",
        choices=(GENERAL_FUND,),
    ),
]
