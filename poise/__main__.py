#!/usr/bin/env python3
"""
Main entry point for the Poise practice engine.
Allows running the package with: python -m poise
"""
import os
import sys

import yaml

from .config import get_config
from .utils import setup_logging
from .coaching.errors import SessionStateError, ScenarioValidationError
from .coaching.report import format_report
from .coaching.scenario_library import default_catalog
from .coaching.scenarios import load_scenarios


USAGE = """Usage: python -m poise [options]

  --scenario=ID        Scenario id or title word (default: coffee-shop)
  --user=ID            Who is practicing (default: current-user)
  --scenarios=FILE     Extra scenarios from a YAML file
  --offline            No cloud services; replies follow the scenario script
  --text, --no-tts     Do not speak replies aloud
  --list               List scenarios and exit
  --progress           Show medals and recent trends and exit

In a session type your reply, or:
  /audio FILE          Send a 16 kHz mono LINEAR16 recording
  /quit                Finish and show the report"""


def _arg_value(name: str):
    prefix = f"--{name}="
    for arg in sys.argv[1:]:
        if arg.startswith(prefix):
            return arg[len(prefix):]
    return None


def _build_catalog():
    catalog = default_catalog()
    extra = _arg_value("scenarios")
    if extra:
        try:
            for scenario in load_scenarios(extra):
                catalog.register(scenario, replace=True)
        except (OSError, yaml.YAMLError, ScenarioValidationError) as e:
            print(f"❌ Could not load scenarios from {extra}: {e}")
            sys.exit(1)
    return catalog


def _print_scenarios(catalog):
    print("🎭 Available scenarios:")
    for scenario in catalog.list_scenarios():
        print(f"   {scenario.id:<22} {scenario.title} [{scenario.display.difficulty}]")
        print(f"   {'':<22} {scenario.description}")


def _print_progress(store, user_id: str):
    profile = store.get_user(user_id)
    if profile is None:
        print(f"📭 No progress yet for {user_id}")
        return

    print(f"🏅 {user_id}: level {profile.level}, {profile.total_sessions} sessions, "
          f"average score {profile.average_score}")
    unlocked = profile.unlocked_medals
    if not unlocked:
        print("   No medals unlocked yet")
    for medal, level in unlocked.items():
        print(f"   {medal:<14} level {level}")

    analytics = store.get_emotion_analytics(user_id)
    if analytics.total_sessions:
        print(f"📈 Last {analytics.total_sessions} sessions: trend {analytics.score_trend}")
        for emotion, mean in sorted(analytics.emotion_means().items(), key=lambda kv: -kv[1])[:5]:
            print(f"   {emotion:<14} {mean * 100:5.1f}%")


def _build_live_orchestrator(config, catalog, use_tts: bool):
    """Wire the real cloud collaborators."""
    from .coaching.orchestrator import PracticeOrchestrator
    from .coaching.responder import ReplyEngine
    from .coaching.services import TranscriptionService, SpeechService, EmotionFeed
    from .infrastructure import VertexRestClient, HumeBatchClient, ProfileStore

    llm_client = VertexRestClient(
        project=config.google_cloud_project,
        location=config.vertex_location,
        model=config.model_name,
        credentials_json=config.google_application_credentials,
    )
    emotion_feed = None
    if config.has_emotion_feed:
        emotion_feed = EmotionFeed(HumeBatchClient(config.hume_api_key))
    else:
        print("ℹ️  HUME_API_KEY not set: scoring uses engagement only")

    return PracticeOrchestrator(
        catalog=catalog,
        store=ProfileStore(config.data_dir),
        reply_engine=ReplyEngine(llm_client),
        transcription=TranscriptionService(language_code=config.language_code),
        speech=SpeechService(enabled=use_tts, voice=config.tts_voice, language_code=config.language_code),
        emotion_feed=emotion_feed,
    )


def _print_outcome(outcome):
    if outcome.discarded:
        return
    if not outcome.ok:
        print(f"⚠️  {outcome.error_message}")
        return
    print(f"🤖 {outcome.ai_message.content}")
    print(f"   (score {outcome.score})")
    for warning in outcome.warnings:
        print(f"⚠️  {warning}")


def _run_session(orchestrator, scenario, user_id: str):
    opening = orchestrator.start(scenario.id, user_id)
    print(f"\n🎬 {scenario.title}: {scenario.description}")
    if scenario.display.primary_objective:
        print(f"🎯 {scenario.display.primary_objective}")
    print("   (type /quit to finish)\n")
    print(f"🤖 {opening.ai_message.content}")
    for warning in opening.warnings:
        print(f"⚠️  {warning}")

    while True:
        try:
            line = input("🙂 ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if line in ("/quit", "/exit"):
            break
        if line.startswith("/audio "):
            path = line[len("/audio "):].strip()
            try:
                with open(path, "rb") as handle:
                    audio = handle.read()
            except OSError as e:
                print(f"❌ Could not read {path}: {e}")
                continue
            outcome = orchestrator.submit_audio(audio)
            if outcome.user_message is not None:
                print(f"📝 {outcome.user_message.content}")
        else:
            outcome = orchestrator.submit_text(line)
        _print_outcome(outcome)

        if orchestrator.session.is_overtime():
            print("⏰ Time's up for this scenario. Type /quit whenever you're ready.")

    summary = orchestrator.finish()
    if summary is None:
        return

    print("\n📊 Session report")
    print(format_report(summary.report))
    print(f"\n💬 {summary.feedback}")
    if summary.progress is not None and summary.progress.leveled_up:
        for medal, (old_level, new_level) in summary.progress.medal_level_ups.items():
            print(f"🏅 {medal} medal: level {old_level} -> {new_level}")
    for warning in summary.warnings:
        print(f"⚠️  {warning}")


def main():
    """Command-line interface for the practice orchestrator."""
    if "--help" in sys.argv or "-h" in sys.argv:
        print(USAGE)
        return

    offline = "--offline" in sys.argv

    # Load configuration from environment
    try:
        config = get_config(require_cloud=not offline)
    except ValueError as e:
        print(f"❌ Configuration Error: {e}")
        print("   (Use --offline to practice without cloud services)")
        sys.exit(1)

    log_file = setup_logging(config.log_file, config.log_level)
    catalog = _build_catalog()

    if "--list" in sys.argv:
        _print_scenarios(catalog)
        return

    user_id = _arg_value("user") or config.default_user_id

    if "--progress" in sys.argv:
        from .infrastructure.data import ProfileStore
        _print_progress(ProfileStore(config.data_dir), user_id)
        return

    requested = _arg_value("scenario") or config.default_scenario
    scenario = catalog.get_scenario(requested) or catalog.find_scenario_by_title_fragment(requested)
    if scenario is None:
        print(f"❌ Unknown scenario: {requested} (use --list)")
        sys.exit(1)

    use_tts = config.enable_tts and not ("--text" in sys.argv or "--no-tts" in sys.argv)

    if offline:
        from .coaching.testing import create_offline_orchestrator
        print("📴 Offline mode: replies follow the scenario script, nothing is spoken")
        orchestrator = create_offline_orchestrator(scenario.id, config.data_dir, catalog)
    else:
        if use_tts:
            print("🔊 TTS Mode: replies are spoken aloud (use --text to disable)")
        orchestrator = _build_live_orchestrator(config, catalog, use_tts)

    print(f"📁 Logs: {os.path.abspath(log_file)}")

    try:
        _run_session(orchestrator, scenario, user_id)
    except SessionStateError as e:
        print(f"❌ {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
