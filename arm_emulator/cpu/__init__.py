"""CPU core: register file, classifier, barrel shifter and ALU."""
