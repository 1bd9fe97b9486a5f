# Role: Local developer CLI to talk to the booking assistant without the website widget.
# Uses the same wiring as the API (Supabase or in-memory store, Gemini or deterministic replies).

from __future__ import annotations

import json

import booking_assistant.config
booking_assistant.config.load_env()

from booking_assistant.api.deps import flow_controller


def main() -> None:
    # 1) Build the FlowController from the environment
    # 2) Keep one session_id across turns (/new starts over)
    # 3) Route user input -> FlowController -> print reply (+ a marker when the booking was saved)
    print("VIP Booking Assistant CLI")
    print("Commands: /new (new session), /session (show session_id), /state (show booking), /exit")
    print("-" * 50)

    flow = flow_controller
    session_id = flow.start_session().session_id
    print(f"session_id: {session_id}")

    while True:
        try:
            user_message = input("\nYou: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            return

        if not user_message:
            continue

        cmd = user_message.lower()

        if cmd in {"/exit", "exit", "quit", "/quit"}:
            print("Bye!")
            return

        if cmd in {"/new", "new"}:
            session_id = flow.reset_session(session_id).session_id
            print(f"New session_id: {session_id}")
            continue

        if cmd in {"/session", "session"}:
            print(f"session_id: {session_id}")
            continue

        if cmd in {"/state", "state"}:
            state = flow.get_state(session_id)
            if state is not None:
                print(json.dumps(state.booking.known_fields(), indent=2))
                print(f"missing: {', '.join(state.missing_fields) or '-'}")
                print(f"booking_id: {state.booking_id or '-'}")
            continue

        result = flow.process_message(session_id, user_message)
        print(f"\nAssistant: {result.response}")
        if result.booking_ready:
            print("[booking saved]")


if __name__ == "__main__":
    main()
