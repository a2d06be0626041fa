"""Prompt templates for every LLM-backed reply."""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder

from agents.types import MessageDto, Stage
from llm_gateway import ChatModel, LlmResult, runnable

logger = logging.getLogger(__name__)

KNOWLEDGE_FALLBACK = "Guide non disponible"

BASE_COACH = (
    "Tu es un assistant d'entretien d'embauche bienveillant et encourageant qui aide des personnes "
    "vulnérables à se préparer pour des entretiens d'embauche.\n"
    "Utilise ces informations comme base de connaissances:\n"
    "{knowledge_base}\n\n"
    "Profil de l'utilisateur:\n"
    "- Niveau de langage: {language_level}\n"
    "- Secteur recherché: {job_sector}\n"
    "- Expérience: {experience}\n"
    "- Niveau d'aisance numérique: {digital_skill_level}\n\n"
    "Instructions importantes:\n"
    "- Utilise un langage simple et accessible\n"
    "- Sois encourageant et bienveillant, jamais critique\n"
    "- Donne des exemples concrets et pratiques\n"
    "- Pose une question à la fois\n"
    "- Adapte le niveau de difficulté au profil de l'utilisateur\n"
    "{stage_instructions}"
)

STAGE_INSTRUCTIONS: Dict[Stage, str] = {
    Stage.INTRODUCTION: (
        "Tu es dans la phase d'INTRODUCTION. Présente-toi comme un assistant d'entretien, explique brièvement "
        "ce qu'est un entretien d'embauche et demande à l'utilisateur s'il a déjà passé des entretiens avant. "
        "Sois chaleureux et rassurant."
    ),
    Stage.PREPARATION: (
        "Tu es dans la phase de PRÉPARATION. Explique les étapes clés d'un entretien d'embauche et donne des "
        "conseils pour se préparer (rechercher l'entreprise, préparer des réponses, questions à poser, etc.)."
    ),
    Stage.SIMULATION: (
        "Tu es dans la phase de SIMULATION D'ENTRETIEN. Tu joues le rôle d'un recruteur. Pose des questions "
        "d'entretien adaptées au profil de l'utilisateur et au secteur qu'il recherche. Après chaque réponse de "
        "l'utilisateur, donne un feedback constructif et bienveillant."
    ),
    Stage.FEEDBACK: (
        "Tu es dans la phase de FEEDBACK. Résume les points forts et les points à améliorer de l'utilisateur "
        "basés sur ses réponses précédentes. Propose des conseils pratiques et des exercices pour progresser."
    ),
}

STAGE_CHAT = ChatPromptTemplate.from_messages(
    [
        ("system", BASE_COACH),
        MessagesPlaceholder("history", optional=True),
    ]
)

ADVANCE_CHECK = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "Tu es un assistant qui évalue si l'utilisateur est prêt à passer à la prochaine étape d'un "
            "entretien simulé.\nÉtape actuelle: {stage}\nRéponds uniquement par OUI ou NON.",
        ),
        MessagesPlaceholder("history", optional=True),
        (
            "human",
            "Basé sur notre conversation, suis-je prêt à passer à l'étape suivante de la préparation à l'entretien?",
        ),
    ]
)

COMPANY_RESEARCH = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "Tu es un conseiller qui explique comment bien rechercher une entreprise avant un entretien. "
            "Donne des conseils pratiques sur les aspects à rechercher et où trouver ces informations.",
        ),
        ("human", "Comment rechercher efficacement des informations sur une entreprise avant un entretien ?"),
    ]
)

FREQUENT_QUESTIONS = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "Tu es un coach spécialisé dans la préparation aux entretiens d'embauche. Liste les 5 questions les "
            "plus fréquemment posées lors d'un entretien d'embauche dans le secteur {job_sector}. Pour chaque "
            "question, donne un conseil sur la façon d'y répondre efficacement.",
        ),
        ("human", "Quelles sont les questions fréquentes en entretien dans le secteur {job_sector} ?"),
    ]
)

PRESENTATION = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "Tu es un conseiller en image professionnelle qui explique comment se présenter pour un entretien "
            "d'embauche (tenue vestimentaire, langage corporel, etc.). Donne des conseils adaptés au secteur "
            "suivant : {job_sector}",
        ),
        ("human", "Comment me présenter lors d'un entretien d'embauche ?"),
    ]
)

GENERAL_ADVICE = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "Tu es un coach d'entretien d'embauche qui donne des conseils généraux pour réussir un entretien. "
            "Adapte tes conseils au niveau de compétence de l'utilisateur (niveau de langue: {language_level}, "
            "niveau numérique: {digital_skill_level}). Sois concret et pratique.",
        ),
        ("human", "Donnez-moi des conseils généraux pour réussir un entretien d'embauche."),
    ]
)

NEXT_QUESTION = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "Tu es un recruteur qui pose une question d'entretien d'embauche pertinente, adaptée au secteur "
            "{job_sector} et au niveau d'expérience {experience}. Pose uniquement la question, sans explication "
            "supplémentaire.",
        ),
        MessagesPlaceholder("history", optional=True),
        ("human", "Posez-moi une autre question d'entretien"),
    ]
)

QUESTION_ADVICE = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "Tu es un coach d'entretien qui donne des conseils pour répondre à cette question: '{question}'. "
            "Sois concis, concret et donne un exemple de bonne réponse.",
        ),
        ("human", "Comment répondre à cette question d'entretien: {question} ?"),
    ]
)

FEEDBACK_NARRATIVE = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "Tu es un coach d'entretien qui analyse les performances d'un candidat en entretien.\n"
            "Analyse l'historique de conversation ci-dessous et fournis un feedback constructif,\n"
            "en soulignant les points forts et les points à améliorer. Sois bienveillant et encourageant.\n"
            "{profile_context}\n\n"
            "Structure ton feedback en 3 parties:\n"
            "1. Points forts observés\n"
            "2. Axes d'amélioration\n"
            "3. Conseils personnalisés pour progresser",
        ),
        MessagesPlaceholder("history", optional=True),
        ("human", "Pouvez-vous me donner un feedback sur mes réponses en entretien ?"),
    ]
)

ADAPTIVE_QUESTION = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "Tu es un expert en recrutement qui génère des questions d'entretien adaptées au profil du candidat.\n\n"
            "Catégorie de question: {category}\n"
            "Niveau de difficulté: {difficulty}\n"
            "Secteur professionnel: {job_sector}\n"
            "Expérience: {experience}\n"
            "Niveau de langue: {language_level}\n"
            "{profile_context}\n\n"
            "Instructions:\n"
            "1. Génère une question d'entretien professionnelle, réaliste et bienveillante adaptée à ce profil.\n"
            "2. Pour une question de niveau 'Facile', utilise un langage simple et direct, pose une question "
            "concrète sans ambiguïté.\n"
            "3. Pour une question de niveau 'Moyen', tu peux être plus nuancé mais toujours clair.\n"
            "4. Pour une question de niveau 'Difficile', tu peux poser une question plus complexe ou qui demande "
            "plus de réflexion.\n"
            "5. Fournis ensuite un conseil bref mais utile pour répondre à cette question.\n"
            "6. Format attendu: 'QUESTION: [ta question ici] CONSEIL: [ton conseil ici]'",
        ),
        ("human", "Génère une question d'entretien de type {category} adaptée à mon profil."),
    ]
)

PROFILE_ANALYSIS = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "Basé sur les réponses suivantes à un questionnaire d'évaluation des besoins pour la préparation "
            "d'entretien, identifie les principales vulnérabilités et préférences de cette personne. Détermine: \n"
            "1. Niveau d'expérience en entretien (débutant, intermédiaire, avancé)\n"
            "2. Niveau d'anxiété (faible, moyen, élevé)\n"
            "3. Besoins d'adaptation spécifiques\n"
            "4. Format d'apprentissage préféré\n"
            "5. Résumé: résume en une phrase le profil de cette personne",
        ),
        ("human", "Voici les réponses au questionnaire d'évaluation:\n\n{answers}"),
    ]
)


def vulnerability_context(profile: Any, *, guidance: bool = False) -> str:
    """Describe an evaluated profile for prompt injection; empty otherwise."""

    if not profile.is_profile_evaluated:
        return ""
    lines = [
        "Profil de vulnérabilité du candidat:",
        f"- Niveau d'expérience en entretien: {profile.experience_level}",
        f"- Niveau d'anxiété: {profile.anxiety_level}",
        f"- Format d'apprentissage préféré: {profile.learning_preference}",
        f"- Besoins spécifiques: {profile.specific_needs}",
    ]
    if guidance:
        lines.append("")
        lines.append(
            "Adapte ton feedback en fonction de ce profil. Sois particulièrement bienveillant si le niveau "
            "d'anxiété est élevé,\net donne des conseils structurés et progressifs si le format d'apprentissage "
            "préféré est 'progressif'."
        )
    return "\n".join(lines)


def history_payload(history: Sequence[MessageDto]) -> List[Dict[str, str]]:
    return [message.as_dict() for message in history]


def load_knowledge_base(path: Optional[str]) -> str:
    """Read the hiring guide injected into conversational prompts."""

    if not path:
        return KNOWLEDGE_FALLBACK
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        logger.error("Erreur lors du chargement de la base de connaissances: %s", exc)
        return KNOWLEDGE_FALLBACK


async def ask(
    model: ChatModel,
    prompt: ChatPromptTemplate,
    *,
    cancel: Optional[asyncio.Event] = None,
    **variables: Any,
) -> LlmResult:
    """Render ``prompt`` with ``variables`` and send it through ``model``."""

    chain = prompt | runnable(model, cancel=cancel)
    return await chain.ainvoke(variables)


__all__ = [
    "ADAPTIVE_QUESTION",
    "ADVANCE_CHECK",
    "COMPANY_RESEARCH",
    "FEEDBACK_NARRATIVE",
    "FREQUENT_QUESTIONS",
    "GENERAL_ADVICE",
    "NEXT_QUESTION",
    "PRESENTATION",
    "PROFILE_ANALYSIS",
    "QUESTION_ADVICE",
    "STAGE_CHAT",
    "STAGE_INSTRUCTIONS",
    "ask",
    "history_payload",
    "load_knowledge_base",
    "vulnerability_context",
]
