"""
SUPPORT ASSISTANT CHAT CLIENT
=============================

PURPOSE:
Command-line client for trying the Support Assistant API without the browser page.

USAGE:
    python chat_cli.py [base_url]

    Make sure the server is running first: python run.py

COMMANDS:
    /style <name>     - Set responseStyle (friendly, technical, concise); "/style" alone clears it
    /ticket <subject> - Open a support ticket for the current session
    /status           - Show service status
    /export           - Show how many conversation turns are stored
    /clear            - Start a new session
    /quit or /exit    - Exit
"""

import sys
from uuid import uuid4

import requests

from config import ASSISTANT_NAME


# -----------------------------------------------------------------------------
# CONFIGURATION
# -----------------------------------------------------------------------------
BASE_URL = "http://localhost:8000"
SESSION_ID = None
RESPONSE_STYLE = None


def print_header():
    print("\n" + "=" * 60)
    print(f"{ASSISTANT_NAME} - Chat Client")
    print("=" * 60)
    print("\nCommands:")
    print("  /style <name>      - friendly, technical or concise")
    print("  /ticket <subject>  - Open a support ticket")
    print("  /status            - Service status")
    print("  /export            - Count stored conversation turns")
    print("  /clear             - Start new session")
    print("  /quit              - Exit")
    print("=" * 60 + "\n")


# -----------------------------------------------------------------------------
# API CALLS
# -----------------------------------------------------------------------------

def send_message(message):
    """POST the message to /api/chat and return the reply text (or an error line)."""
    global SESSION_ID
    if not SESSION_ID:
        SESSION_ID = str(uuid4())

    payload = {"message": message, "sessionId": SESSION_ID}
    if RESPONSE_STYLE:
        payload["settings"] = {"responseStyle": RESPONSE_STYLE}

    try:
        response = requests.post(f"{BASE_URL}/api/chat", json=payload, timeout=30)
        data = response.json()
        if response.status_code == 200:
            return data.get("response", "No response")
        return f"Error {response.status_code}: {data.get('response') or data.get('error')}"
    except requests.exceptions.ConnectionError:
        return "Cannot connect to backend. Start it with: python run.py"
    except requests.exceptions.Timeout:
        return "Request timed out."
    except ValueError:
        return "Server returned a non-JSON response."


def open_ticket(subject):
    try:
        response = requests.post(
            f"{BASE_URL}/api/tickets",
            json={"subject": subject, "description": subject, "sessionId": SESSION_ID},
            timeout=10,
        )
        data = response.json()
        return f"{data.get('message')} (ticket {data.get('ticketId')})"
    except requests.exceptions.RequestException as e:
        return f"Error opening ticket: {e}"


def show_status():
    try:
        services = requests.get(f"{BASE_URL}/api/status", timeout=10).json()["services"]
    except (requests.exceptions.RequestException, ValueError, KeyError) as e:
        return f"Error retrieving status: {e}"
    return "\n".join(f"  {name}: {info}" for name, info in services.items())


def count_exported():
    try:
        data = requests.get(f"{BASE_URL}/api/export", timeout=30).json()
    except (requests.exceptions.RequestException, ValueError) as e:
        return f"Error exporting: {e}"
    return f"{len(data.get('conversations', []))} conversation turn(s) stored (exported {data.get('exportDate')})"


# -----------------------------------------------------------------------------
# MAIN LOOP
# -----------------------------------------------------------------------------

def main():
    global BASE_URL, SESSION_ID, RESPONSE_STYLE
    if len(sys.argv) > 1:
        BASE_URL = sys.argv[1].rstrip("/")

    print_header()

    while True:
        try:
            user_input = input("\nYou: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\nGoodbye!")
            break

        if not user_input:
            continue
        if user_input in ("/quit", "/exit"):
            print("\nGoodbye!")
            break
        if user_input == "/clear":
            SESSION_ID = None
            print("Session cleared. Starting fresh!")
        elif user_input.startswith("/style"):
            RESPONSE_STYLE = user_input[len("/style"):].strip() or None
            print(f"Response style: {RESPONSE_STYLE or 'default'}")
        elif user_input.startswith("/ticket"):
            subject = user_input[len("/ticket"):].strip()
            print(open_ticket(subject) if subject else "Usage: /ticket <subject>")
        elif user_input == "/status":
            print(show_status())
        elif user_input == "/export":
            print(count_exported())
        elif user_input.startswith("/"):
            print(f"Unknown command: {user_input}")
        else:
            print(f"{ASSISTANT_NAME}: {send_message(user_input)}")


if __name__ == "__main__":
    main()
