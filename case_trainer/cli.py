from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Callable, Sequence

from .api_client import ApiClient
from .config import TrainerConfig
from .history import HistoryScreen
from .observability import configure_logging
from .prompts import PrompterProtocol, build_prompter
from .report import ReportScreen
from .responder import respond
from .schemas import CasePayload
from .session_context import AuthContext, TokenStore
from .training import TrainingScreen

logger = logging.getLogger(__name__)

DIAGNOSE_COMMAND = "/diagnose"
QUIT_COMMANDS = {"/quit", "/exit"}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="case-trainer",
        description="Terminal front end for simulated-patient clinical training.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    set_token = sub.add_parser("set-token", help="Store the API auth token locally.")
    set_token.add_argument("token")

    sub.add_parser("clear-token", help="Remove the stored auth token.")

    ask = sub.add_parser("ask", help="Ask the scripted patient of a local case file.")
    ask.add_argument("--case-file", required=True, type=Path)
    ask.add_argument("question", nargs="+")

    train = sub.add_parser("train", help="Run an interactive training session.")
    train.add_argument("session_id", type=int)

    report = sub.add_parser("report", help="Show the scored report for a session.")
    report.add_argument("session_id", type=int)

    sub.add_parser("history", help="List training history.")
    return parser


def _run_ask(case_file: Path, question: str, output: Callable[[str], None]) -> int:
    # pydantic's ValidationError is a ValueError, as is JSONDecodeError.
    try:
        payload = json.loads(case_file.read_text(encoding="utf-8"))
        case = CasePayload.model_validate(payload).to_model()
    except (OSError, ValueError) as exc:
        logger.error("Cannot read case file %s: %s", case_file, exc)
        return 1
    output(respond(question, case))
    return 0


def _run_train(
    screen: TrainingScreen,
    input_fn: Callable[[str], str],
    output: Callable[[str], None],
) -> int:
    screen.load()
    if screen.session is None:
        return 1
    header = screen.header
    output(f"{header['title']} | {header['mode']} | {header['difficulty']}")
    for line in screen.patient_panel:
        output(f"  {line}")
    for message in screen.messages:
        output(f"[{message.role.value}] {message.content}")
    output(f"Type a question, '{DIAGNOSE_COMMAND} <diagnosis>' to finish, or /quit.")

    while True:
        try:
            text = input_fn("> ")
        except EOFError:
            return 0
        command = text.strip()
        if command in QUIT_COMMANDS:
            return 0
        if command.startswith(DIAGNOSE_COMMAND):
            screen.select_tab("diagnosis")
            route = screen.submit_diagnosis(command[len(DIAGNOSE_COMMAND):].strip())
            if route:
                output(f"Report available at {route}")
                return 0
            screen.select_tab("chat")
            continue
        reply = screen.send_message(text)
        if reply:
            output(f"[ai] {reply}")


def _run_report(screen: ReportScreen, output: Callable[[str], None]) -> int:
    screen.load()
    if screen.session is None:
        output("Report unavailable.")
        return 1
    output(f"{screen.score}分  {screen.headline}")
    output(f"您的诊断：{screen.student_diagnosis}")
    output(f"正确诊断：{screen.correct_diagnosis}")
    for item in screen.breakdown():
        output(f"  {item.label}: {item.summary}")
    return 0


def _run_history(screen: HistoryScreen, output: Callable[[str], None]) -> int:
    screen.load()
    for row in screen.rows():
        output(
            f"{row.session_id}\t{row.case_title}\t{row.mode}\t{row.status}\t"
            f"{row.score}\t{row.started_on}\t{row.action} {row.route}"
        )
    return 0


def main(
    argv: Sequence[str] | None = None,
    *,
    config: TrainerConfig | None = None,
    api: ApiClient | None = None,
    prompter: PrompterProtocol | None = None,
    input_fn: Callable[[str], str] = input,
    output: Callable[[str], None] = print,
) -> int:
    args = _build_parser().parse_args(argv)
    config = config or TrainerConfig.from_env()
    configure_logging(config.log_level)
    store = TokenStore(config.token_path)

    if args.command == "set-token":
        store.save(AuthContext(token=args.token))
        return 0
    if args.command == "clear-token":
        store.clear()
        return 0
    if args.command == "ask":
        return _run_ask(args.case_file, " ".join(args.question), output)

    auth = store.load()
    if not auth.is_authenticated:
        logger.warning("No auth token stored; requests will be sent anonymously.")
    prompter = prompter or build_prompter(config)
    api = api or ApiClient.from_config(config)
    with api:
        if args.command == "train":
            screen = TrainingScreen(api, auth, prompter, args.session_id)
            return _run_train(screen, input_fn, output)
        if args.command == "report":
            report = ReportScreen(api, auth, prompter, args.session_id, pass_score=config.pass_score)
            return _run_report(report, output)
        return _run_history(HistoryScreen(api, auth, prompter), output)
