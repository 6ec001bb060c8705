"""Front-end side of the call bridge, as script text.

``BOOTSTRAP_JS`` keeps one pending promise per sequence token. Each
binding script installs ``window[name](...args)``, which allocates a
fresh token, hands ``(name, seq, JSON.stringify(args))`` to the
backend's ``send`` transport and returns the promise. ``settle`` is
evaluated by the host to resolve (status 0) or reject (status 1) it.
"""

import json

from positron.bridge.envelope import ReturnValue

BOOTSTRAP_JS = """\
(function () {
  if (window.__positron) return;
  var pending = new Map();
  var counter = 0;
  window.__positron = {
    send: null,
    call: function (name, args) {
      counter += 1;
      var seq = counter.toString(36) + "-" + Date.now().toString(36);
      return new Promise(function (resolve, reject) {
        pending.set(seq, { resolve: resolve, reject: reject });
        try {
          window.__positron.send(name, seq, JSON.stringify(args));
        } catch (err) {
          pending.delete(seq);
          reject(String(err));
        }
      });
    },
    settle: function (seq, status, result) {
      var entry = pending.get(seq);
      if (!entry) return;
      pending.delete(seq);
      var value = result === "" ? undefined : JSON.parse(result);
      if (status === 0) entry.resolve(value); else entry.reject(value);
    }
  };
})();
"""


def binding_script(name: str) -> str:
    """Install ``window[name]`` as a promise-returning bridge call."""
    quoted = json.dumps(name)
    return (
        f"window[{quoted}] = function () {{"
        f" return window.__positron.call({quoted}, Array.prototype.slice.call(arguments));"
        f" }};"
    )


def settle_script(seq: str, envelope: ReturnValue) -> str:
    """Settle the promise for *seq*.

    The payload travels as a JS string literal and is parsed on the
    other side, so arbitrary result text cannot break out of the call.
    """
    return (
        f"window.__positron.settle({json.dumps(seq)}, {envelope.status}, "
        f"{json.dumps(envelope.text)});"
    )
