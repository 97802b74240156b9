import sys

from rich import print
from rich.pretty import pprint

from argfield import *


def say(context, values):
    for value in values:
        print(value)
    for passed in context.flags:
        print(f"from 'say': {passed.name}")


def kill(context):
    print("kill all humanz!")


parser = Parser(name="field", disable_lock=True)
parser.add_subcommand("say", say, 3)
parser.add_subcommand("mute", say, 1)
parser.add_flag("-kill", kill)


if __name__ == '__main__':
    parser.parse(sys.argv, index=1)
    pprint(parser.context)
