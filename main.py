from rich.pretty import pprint

from optkit import *

options = Options("main", "optkit example")

(options.add_options()
    ("h,help", "print this help")
    ("d,debug", "enable debugging")
    ("l,level", "verbosity level", value(uint8).default_value("1").env("MAIN_LEVEL"), "N")
    ("o,output", "output file", value(str).implicit_value("a.out"), "FILE")
    ("files", "input files", value(list[str])))

options.parse_positional("files")


if __name__ == '__main__':
    try:
        result = options.parse()
    except OptionError as fault:
        trigger(fault, shell=True, program=options.program)
    else:
        if result.has("help"):
            options.print_help()
        pprint(result)
        pprint(result["files"] if result.has("files") else result["level"])
