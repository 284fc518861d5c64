"""Method-call bridge between a QML front-end and host-platform operations.

Usage:
    from methods_bridge.app.host import BridgeHost

    host = BridgeHost()
    engine.rootContext().setContextProperty("methods", host.channel)
    ...
    host.close()
"""
