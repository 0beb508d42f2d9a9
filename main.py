from rich.pretty import pprint

from slimshell import *


def greet(arguments):
    name = arguments["name"]
    return Response(True, [f"HELLO {name.upper()}!" if arguments.get("loud") else f"hello {name}"])


def status(arguments):
    return Response(True, ["all systems nominal"])


if __name__ == '__main__':
    shell = Shell(title="demo", version="0.1.0", exits=["quit"])
    shell.on("status").call(status)
    pprint(shell.registry)
    shell.on("greet").call(greet).requiring([
        ArgumentSpec("name", "who should be greeted", ["n"]),
    ]).run()
