"""
Command-line runner for the relationship-phase diagnosis.

Usage:
    python -m diagnosis.run --answers 1,2,3,4,5,1,2,3,4,5,1,2,3,4,5,1,2,3,4,5
    python -m diagnosis.run --random --seed 7
    python -m diagnosis.run --interactive --store .diagnosis_state.json

The runner performs the following steps:
1. Load and validate configuration
2. Collect answers (argument, random or interactive session)
3. Evaluate rarity, alias, result keys and phase bands
4. Attach narrative texts for each phase key
5. Print the result JSON and optionally save it
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, Any, Callable, Optional
import json

import yaml

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def setup_logging(log_level: str) -> None:
    """Configure logging level from config."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.getLogger().setLevel(level)


def ask_answers(state, input_fn: Callable[[str], str] = input, output_fn: Callable[[str], None] = print):
    """
    Walk a session through both question pages on the terminal.

    Unanswered questions are asked in order; invalid input is asked again.
    """
    from .aggregation import InvalidInputError
    from .inference import QUESTIONS
    from .session import Screen

    if state.screen not in (Screen.PAGE_1, Screen.PAGE_2):
        state = state.start()

    output_fn("Answer each statement: 1 = strongly agree ... 5 = strongly disagree")
    for index, question in enumerate(QUESTIONS):
        if state.answers[index] is not None:
            continue
        while True:
            raw = input_fn(f"{question.qid}. {question.text} [1-5]: ").strip()
            try:
                state = state.set_answer(index, int(raw))
                break
            except (ValueError, InvalidInputError):
                output_fn("Please enter a number from 1 to 5.")
        if state.screen == Screen.PAGE_1 and state.page_complete(0):
            state = state.next_page()
    return state


def attach_texts(result_dict: Dict[str, Any], result, texts_path: Optional[str]) -> None:
    """Add narrative paragraphs for each phase key, if a catalog loads."""
    from .texts import TextCatalog

    try:
        catalog = TextCatalog.from_yaml(texts_path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.warning(f"Narrative texts unavailable: {e}")
        return

    result_dict["phase_texts"] = {}
    for phase, key in result.result_keys.items():
        block = catalog.get(phase, key)
        result_dict["phase_texts"][phase.value] = {
            "label": block.label,
            "key": block.key,
            "sections": block.sections,
        }


def run_diagnosis(
    config_path: Optional[str] = None,
    answers: Optional[str] = None,
    random_answers: bool = False,
    seed: Optional[int] = None,
    interactive: bool = False,
    phase_trend: Optional[str] = None,
    output: Optional[str] = None,
    store_path: Optional[str] = None,
    texts_path: Optional[str] = None,
    include_breakdown: bool = False,
    input_fn: Callable[[str], str] = input
) -> Dict[str, Any]:
    """
    Run one diagnosis.

    Args:
        config_path: Path to the configuration YAML file
        answers: Comma separated answers
        random_answers: Draw answers uniformly at random
        seed: Seed for random answers (defaults to global.random_seed)
        interactive: Ask the questions on the terminal
        phase_trend: Phase trend for the alias pool
        output: If provided, write the result JSON here
        store_path: If provided, resume from and save to this local store
        texts_path: Narrative text catalog (defaults to configs/texts.yaml)
        include_breakdown: Attach the rarity breakdown
        input_fn: Line reader for interactive mode

    Returns:
        Dictionary with success flag and result
    """
    from .aggregation import AnswerVector
    from .configs import DEFAULT_CONFIG_PATH, load_config, validate_config
    from .inference import DiagnosisEvaluator
    from .session import LocalStore, SessionState

    config = load_config(config_path or str(DEFAULT_CONFIG_PATH))
    issues = validate_config(config)
    if issues:
        for issue in issues:
            logger.warning(f"Config issue: {issue}")

    setup_logging(config.get("global", {}).get("log_level", "INFO"))

    store = LocalStore(store_path) if store_path else None
    state = SessionState()
    if store:
        saved = store.load()
        if saved:
            try:
                state = SessionState.from_dict(saved)
                logger.info(f"Resumed session ({state.answered_count}/20 answered)")
            except ValueError as e:
                logger.warning(f"Discarding saved session: {e}")

    if answers is not None:
        vector = AnswerVector.from_string(answers)
        state = SessionState().start()
        for index, value in enumerate(vector):
            state = state.set_answer(index, value)
    elif random_answers:
        if seed is None:
            seed = config.get("global", {}).get("random_seed")
        state = SessionState().randomize(seed)
        logger.info(f"Random answers (seed={seed})")
    elif interactive:
        if state.result is not None:
            state = state.retry()
        state = ask_answers(state, input_fn=input_fn)
    else:
        raise ValueError("One of answers, random_answers or interactive is required")

    if store:
        store.save(state.to_dict())

    evaluator = DiagnosisEvaluator.from_config(config, include_breakdown=include_breakdown)
    trend = phase_trend or config.get("alias", {}).get("default_trend")
    result = evaluator.evaluate(state.answer_vector(), phase_trend=trend)
    state = state.finish(result).show_result()

    if store:
        store.save(state.to_dict())

    result_dict = result.to_dict()
    attach_texts(result_dict, result, texts_path)

    if output:
        Path(output).parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", encoding="utf-8") as f:
            json.dump(result_dict, f, indent=2, ensure_ascii=False)
        logger.info(f"Saved result to {output}")

    return {"success": True, "result": result_dict}


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Run the relationship-phase diagnosis"
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--answers",
        type=str,
        help="Comma separated answers for Q1..Q20 (1-5 each)"
    )
    source.add_argument(
        "--random",
        action="store_true",
        help="Use random answers"
    )
    source.add_argument(
        "--interactive",
        action="store_true",
        help="Answer the questions on the terminal"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for --random"
    )
    parser.add_argument(
        "--trend",
        type=str,
        choices=["weak_to_strong", "flat", "strong_to_weak"],
        default=None,
        help="Phase trend used for the phase alias pools"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to configuration file"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write the result JSON to this file"
    )
    parser.add_argument(
        "--store",
        type=str,
        default=None,
        help="Local JSON store used to resume and save the session"
    )
    parser.add_argument(
        "--texts",
        type=str,
        default=None,
        help="Narrative text catalog (YAML)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Include the rarity breakdown in the result"
    )

    args = parser.parse_args()

    try:
        outcome = run_diagnosis(
            config_path=args.config,
            answers=args.answers,
            random_answers=args.random,
            seed=args.seed,
            interactive=args.interactive,
            phase_trend=args.trend,
            output=args.output,
            store_path=args.store,
            texts_path=args.texts,
            include_breakdown=args.debug,
        )
        print(json.dumps(outcome["result"], indent=2, ensure_ascii=False))
        return 0 if outcome["success"] else 1
    except Exception as e:
        logger.exception(f"Diagnosis failed with error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
