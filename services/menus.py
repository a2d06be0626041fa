"""Menu tables presented as suggested actions."""
from __future__ import annotations

from typing import List

from pydantic import BaseModel

from agents.types import Stage

HOME_OPTION = "🏠 Menu principal"
BACK_TO_MAIN = "🏠 Retour au menu principal"
MAIN_MENU_REPLY = "Voici le menu principal :"

EVALUATE_PROFILE = "👤 Évaluer mon profil"
START_PREPARATION = "📋 Commencer la préparation"
SIMULATE_INTERVIEW = "💬 Simuler un entretien"
VIEW_FEEDBACK = "📊 Voir mon feedback"
GENERAL_ADVICE = "❓ Conseils généraux"
UPDATE_PROFILE = "⚙️ Mettre à jour mon profil"

RESEARCH_COMPANY = "🔍 Rechercher l'entreprise"
FREQUENT_QUESTIONS = "🗣️ Questions fréquentes"
PRESENTATION_TIPS = "👔 Conseils de présentation"
PREPARE_ANSWERS = "📝 Préparer mes réponses"

START_SIMULATION = "🚀 Démarrer la simulation"
SHORT_SIMULATION = "⏱️ Simulation courte (5-10 min)"
FULL_SIMULATION = "⏳ Simulation complète (15-20 min)"
THEME_SIMULATION = "🎮 Simulation par thème"

CONTINUE = "✅ Continuer"
PAUSE = "⏸️ Pause"
ASK_ADVICE = "❓ Demander un conseil"
REPEAT_QUESTION = "🔄 Refaire cette question"

READY = "✅ Je suis prêt"
ONE_MINUTE = "⏱️ Donnez-moi une minute"
TIPS_BEFORE = "❓ Quelques conseils avant"

NEW_SIMULATION = "🔄 Nouvelle simulation"

START_EVALUATION = "✅ Commencer l'évaluation"
SKIP_EVALUATION = "⏩ Passer cette étape"

FIELD_SECTOR = "🏢 Secteur d'activité"
FIELD_EXPERIENCE = "📊 Niveau d'expérience"
FIELD_LANGUAGE = "🗣️ Niveau de langue"
FIELD_DIGITAL = "💻 Compétences numériques"


class Menu(BaseModel):
    """A prompt line plus the options offered as buttons."""

    prompt: str
    options: List[str]


MAIN = Menu(
    prompt="📱 Menu Principal - Que souhaitez-vous faire ?",
    options=[EVALUATE_PROFILE, START_PREPARATION, SIMULATE_INTERVIEW, VIEW_FEEDBACK, GENERAL_ADVICE, UPDATE_PROFILE],
)

PREPARATION = Menu(
    prompt="🔄 Préparation à l'entretien - Choisissez une option :",
    options=[RESEARCH_COMPANY, FREQUENT_QUESTIONS, PRESENTATION_TIPS, PREPARE_ANSWERS, BACK_TO_MAIN],
)

SIMULATION = Menu(
    prompt="🎬 Simulation d'entretien - Choisissez une option :",
    options=[START_SIMULATION, SHORT_SIMULATION, FULL_SIMULATION, THEME_SIMULATION, BACK_TO_MAIN],
)

SIMULATION_RESPONSE = Menu(
    prompt="Comment souhaitez-vous continuer ?",
    options=[CONTINUE, PAUSE, ASK_ADVICE, REPEAT_QUESTION, BACK_TO_MAIN],
)

RESEARCH_FOLLOW_UP = Menu(
    prompt="Que voulez-vous faire ensuite ?",
    options=["🌐 Sites à consulter", "📊 Données à rechercher", "📝 Prendre des notes", "🔙 Retour préparation", HOME_OPTION],
)

FAQ_FOLLOW_UP = Menu(
    prompt="Quels types de questions vous intéressent ?",
    options=[
        "💼 Questions sur l'expérience",
        "🔧 Questions techniques",
        "🧠 Questions comportementales",
        "🔙 Retour préparation",
        HOME_OPTION,
    ],
)

QUESTION_TYPES = Menu(
    prompt="Sur quel sujet voulez-vous préparer vos réponses ?",
    options=["👋 Se présenter", "💼 Parcours professionnel", "💪 Forces et faiblesses", "🔮 Projets futurs", HOME_OPTION],
)

PROFILE_UPDATE = Menu(
    prompt="Que souhaitez-vous mettre à jour dans votre profil ?",
    options=[FIELD_SECTOR, FIELD_EXPERIENCE, FIELD_LANGUAGE, FIELD_DIGITAL, HOME_OPTION],
)

READY_OPTIONS = Menu(
    prompt="Êtes-vous prêt à commencer ?",
    options=[READY, ONE_MINUTE, TIPS_BEFORE, HOME_OPTION],
)

SIMULATION_THEMES = Menu(
    prompt="Quel aspect spécifique voulez-vous simuler ?",
    options=["🤝 Début d'entretien", "💰 Négociation salariale", "❓ Questions difficiles", "🧠 Questions pièges", HOME_OPTION],
)

FEEDBACK_OPTIONS = Menu(
    prompt="Que souhaitez-vous faire avec ce feedback ?",
    options=["📊 Feedback détaillé", "📝 Conseils d'amélioration", NEW_SIMULATION, HOME_OPTION],
)

EVALUATION_START = Menu(
    prompt="Prêt à commencer ?",
    options=[START_EVALUATION, SKIP_EVALUATION],
)

EVALUATION_DONE = Menu(
    prompt="Que souhaitez-vous faire maintenant ?",
    options=[START_PREPARATION, SIMULATE_INTERVIEW, GENERAL_ADVICE],
)

HOME_ONLY = Menu(prompt="", options=[HOME_OPTION])

_STAGE_MENUS = {
    Stage.INTRODUCTION: MAIN,
    Stage.PREPARATION: PREPARATION,
    Stage.SIMULATION: SIMULATION,
    Stage.FEEDBACK: SIMULATION_RESPONSE,
}


def stage_menu(stage: Stage) -> Menu:
    """Return the menu offered after a free-text exchange at ``stage``."""

    return _STAGE_MENUS.get(stage, MAIN)
