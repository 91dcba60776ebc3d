#!/usr/bin/python

##############################################################################
#                                                                            #
#  Objective:                                                                #
#    Tiny round-trip latency probe over UDP, loosely modelled on the         #
#    Two-Way Active Measurement Protocol (TWAMP) as defined in RFC5357.      #
#                                                                            #
#  Features supported:                                                       #
#    - unauthenticated mode only                                             #
#    - IPv6 (dual-stack reflector, IPv4 literals work incidentally)          #
#    - text timestamps: "Timestamp: <RFC3339>" / "Round-trip time: ..."      #
#    - per probe round-trip time, min/avg/max summary                        #
#                                                                            #
#  Modes of operation:                                                       #
#    - Reflector                                                             #
#        echoes the timestamp of every probe, optionally as a daemon         #
#    - Controller                                                            #
#        sends probes, waits for the reflection, reports round-trip time    #
#                                                                            #
#  Limitations:                                                              #
#    As there is no hardware based timestamping, latency values measured    #
#    by this tool are not very precise.                                      #
#    The text framing is not wire compatible with RFC5357 test packets.      #
#                                                                            #
#  Not supported:                                                            #
#    - TWAMP-Control session negotiation                                     #
#    - authenticated and encrypted mode                                      #
#    - sequence numbers, loss and jitter statistics                          #
#                                                                            #
##############################################################################

__version__ = "0.1.0"
