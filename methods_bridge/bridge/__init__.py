"""Call routing core: registry, dispatcher, worker queue and home-thread marshaler.

A call flows channel -> dispatcher -> capability (worker / inline / home) ->
marshaler -> reply on the home thread.
"""
