"""
Embedded chat page served at / and /index.html.

A single HTML document with inline CSS and JavaScript: it keeps a session id in
localStorage, posts messages to /api/chat and renders the replies.
"""

import html

from config import ASSISTANT_NAME

INDEX_HTML = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>__ASSISTANT_NAME__</title>
    <style>
      body { font-family: Arial, sans-serif; max-width: 800px; margin: 0 auto; padding: 20px; background: #fafafa; }
      .hero { background: linear-gradient(135deg, #ff6b35, #e55a2b); color: white; padding: 24px; border-radius: 15px; text-align: center; }
      #log { border: 1px solid #ddd; border-radius: 10px; background: white; height: 420px; overflow-y: auto; padding: 12px; margin: 16px 0; }
      .msg { margin: 8px 0; padding: 8px 12px; border-radius: 8px; white-space: pre-wrap; }
      .user { background: #ffe9df; text-align: right; }
      .assistant { background: #f1f1f1; }
      form { display: flex; gap: 8px; }
      input[type=text] { flex: 1; padding: 10px; border: 1px solid #ccc; border-radius: 5px; }
      select, .btn { padding: 10px; border-radius: 5px; }
      .btn { background: #ff6b35; color: white; border: none; cursor: pointer; }
    </style>
  </head>
  <body>
    <div class="hero">
      <h1>__ASSISTANT_NAME__</h1>
      <p>Ask about SSL, DNS, performance or billing.</p>
    </div>
    <div id="log"></div>
    <form id="chat">
      <input type="text" id="message" placeholder="Type a message..." autocomplete="off" required>
      <select id="style">
        <option value="">default</option>
        <option value="friendly">friendly</option>
        <option value="technical">technical</option>
        <option value="concise">concise</option>
      </select>
      <button class="btn" type="submit">Send</button>
    </form>
    <script>
      const log = document.getElementById("log");
      let sessionId = localStorage.getItem("sessionId");
      if (!sessionId) {
        sessionId = Math.random().toString(36).substring(2) + Date.now().toString(36);
        localStorage.setItem("sessionId", sessionId);
      }

      function show(role, text) {
        const div = document.createElement("div");
        div.className = "msg " + role;
        div.textContent = text;
        log.appendChild(div);
        log.scrollTop = log.scrollHeight;
      }

      document.getElementById("chat").addEventListener("submit", async (event) => {
        event.preventDefault();
        const input = document.getElementById("message");
        const message = input.value.trim();
        if (!message) return;
        input.value = "";
        show("user", message);
        const style = document.getElementById("style").value;
        try {
          const res = await fetch("/api/chat", {
            method: "POST",
            headers: { "Content-Type": "application/json" },
            body: JSON.stringify({ message, sessionId, settings: style ? { responseStyle: style } : {} }),
          });
          const data = await res.json();
          show("assistant", data.response || data.error || "No response");
        } catch (err) {
          show("assistant", "Cannot reach the server. Please try again.");
        }
      });
    </script>
  </body>
</html>
""".replace("__ASSISTANT_NAME__", html.escape(ASSISTANT_NAME))
